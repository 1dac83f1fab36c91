"""Seeding of the system catalog into a user's categories.

Seeding is additive and idempotent. Existing records are matched by name
(case-insensitive, trimmed), never deleted, and only written when they have
drifted from the catalog. Categories are committed in one batch and
subcategories in a second one; if the second batch fails the first stays
committed, and re-running the seed completes the job.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from catalog import SystemCatalog
from logger import get_logger
from models.category import SYSTEM, normalize_name
from reconciliation.link_repair import RepairReport
from services.categories import CATEGORIES, SUBCATEGORIES

logger = get_logger(__name__)


@dataclass
class SeedReport:
    """Outcome of one seeding run."""

    catalog_version: str
    categories_created: int = 0
    categories_updated: int = 0
    subcategories_created: int = 0
    subcategories_pinned: int = 0
    link_repair: Optional[RepairReport] = None
    category_ids: Dict[str, str] = field(default_factory=dict)


class SeedingEngine:
    """Makes sure every catalog category and subcategory exists for a user.

    Args:
        store: DocumentStore.
        categories: CategoryService.
        subcategories: SubcategoryService.
        link_repair: LinkRepairEngine run after seeding.
        catalog: SystemCatalog to seed.
    """

    def __init__(self, store, categories, subcategories, link_repair, catalog: SystemCatalog):
        self.store = store
        self.categories = categories
        self.subcategories = subcategories
        self.link_repair = link_repair
        self.catalog = catalog

    def seed(self, owner: str) -> SeedReport:
        """Seed the catalog for a user, then repair task links.

        Returns:
            SeedReport describing what was created or updated.
        """
        logger.info(f"Seeding catalog {self.catalog.version} for {owner}")
        report = SeedReport(catalog_version=self.catalog.version)

        self._seed_categories(owner, report)
        self._seed_subcategories(owner, report)

        report.link_repair = self.link_repair.repair(owner)

        logger.info(
            f"Seed complete for {owner}: "
            f"{report.categories_created} categories created, "
            f"{report.categories_updated} updated, "
            f"{report.subcategories_created} subcategories created, "
            f"{report.subcategories_pinned} pinned"
        )
        return report

    def _seed_categories(self, owner: str, report: SeedReport) -> None:
        # Pure read: must not go through ensure_seeded
        existing = {}
        for category in self.categories.find_all(owner):
            existing.setdefault(category.name_key, category)

        batch = self.store.batch()

        for index, entry in enumerate(self.catalog):
            desired = {
                "kind": SYSTEM,
                "pinned": True,
                "icon": entry.icon,
                "color": entry.color,
                "order": index,
            }
            current = existing.get(normalize_name(entry.name))

            if current is None:
                report.category_ids[entry.name] = batch.create(
                    CATEGORIES,
                    {"owner": owner, "name": entry.name, "active": True, **desired},
                )
                report.categories_created += 1
                logger.debug(f"Creating system category '{entry.name}'")
                continue

            report.category_ids[entry.name] = current.id
            drift = {k: v for k, v in desired.items() if getattr(current, k) != v}
            if drift:
                batch.update(CATEGORIES, current.id, drift)
                report.categories_updated += 1
                logger.debug(f"Updating system category '{current.name}': {sorted(drift)}")

        batch.commit()

    def _seed_subcategories(self, owner: str, report: SeedReport) -> None:
        batch = self.store.batch()

        for entry in self.catalog:
            category_id = report.category_ids[entry.name]
            existing = {}
            for sub in self.subcategories.find_by_category(category_id):
                existing.setdefault(sub.name_key, sub)

            for index, sub_name in enumerate(entry.subcategories):
                current = existing.get(normalize_name(sub_name))

                if current is None:
                    batch.create(
                        SUBCATEGORIES,
                        {
                            "category_id": category_id,
                            "owner": owner,
                            "name": sub_name,
                            "pinned": True,
                            "order": index,
                            "active": True,
                        },
                    )
                    report.subcategories_created += 1
                    logger.debug(f"Creating subcategory '{entry.name}/{sub_name}'")
                    continue

                drift = {}
                if not current.pinned:
                    drift["pinned"] = True
                    report.subcategories_pinned += 1
                    logger.debug(f"Pinning subcategory '{entry.name}/{current.name}'")
                if current.owner != owner:
                    drift["owner"] = owner
                if drift:
                    batch.update(SUBCATEGORIES, current.id, drift)

        batch.commit()
