from holoalbum.db.storage import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    SqlStore,
    delete_key,
    read_json,
    write_json,
)

__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SqlStore",
    "delete_key",
    "read_json",
    "write_json",
]
