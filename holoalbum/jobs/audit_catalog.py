"""
Audit the static valid-id sets against the live catalog.

Walks every category listing and reports ids the catalog exposes that are not
in the valid set (never drawn) and valid ids the catalog no longer lists
(would fail to load). Read-only: the valid sets are not changed.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from holoalbum.models.catalog import VALID_IDS, Category
from holoalbum.models.errors import CatalogError
from holoalbum.services.catalog_gateway import CatalogGateway

logger = logging.getLogger(__name__)


@dataclass
class CategoryAudit:
    category: Category
    listed: int = 0
    unlisted_valid_ids: list[int] = field(default_factory=list)
    unknown_remote_ids: list[int] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.unlisted_valid_ids


async def audit_category(gateway: CatalogGateway, category: Category) -> CategoryAudit:
    """Compare one category's listing with its valid-id set."""
    audit = CategoryAudit(category)
    logger.info("Auditing %s...", category.value)

    try:
        remote = set(await gateway.list_ids(category))
    except CatalogError as e:
        logger.error("Could not list %s: %s", category.value, e.message)
        audit.error = e.message
        return audit

    valid = set(VALID_IDS[category])
    audit.listed = len(remote)
    audit.unlisted_valid_ids = sorted(valid - remote)
    audit.unknown_remote_ids = sorted(remote - valid)

    if audit.unlisted_valid_ids:
        logger.warning(
            "%s: valid ids missing from catalog: %s", category.value, audit.unlisted_valid_ids
        )
    if audit.unknown_remote_ids:
        logger.info(
            "%s: catalog ids outside the valid set: %s", category.value, audit.unknown_remote_ids
        )
    return audit


async def run_audit(gateway: CatalogGateway | None = None) -> dict[Category, CategoryAudit]:
    """Audit every category."""
    if gateway is None:
        async with CatalogGateway() as owned:
            return await run_audit(owned)

    results = {category: await audit_category(gateway, category) for category in Category}
    failing = [c.value for c, a in results.items() if not a.ok]
    logger.info("Catalog audit complete. Categories with problems: %s", failing or "none")
    return results


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    results = asyncio.run(run_audit())
    if not all(audit.ok for audit in results.values()):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
