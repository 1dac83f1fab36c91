"""Entry points that sequence the reconciliation engines."""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, List, Optional

from catalog import SystemCatalog
from logger import get_logger
from models.category import Category
from reconciliation.dedup import DedupReport, DeduplicationEngine
from reconciliation.link_repair import LinkRepairEngine, RepairReport
from reconciliation.seeding import SeedingEngine, SeedReport

logger = get_logger(__name__)


@dataclass
class ResetReport:
    dedup: DedupReport
    seed: SeedReport
    orphan_cleanup: Optional[DedupReport] = None


class ReconciliationService:
    """Runs seeding, deduplication and link repair for a user.

    Calls for the same owner are serialized with an in-process lock; the
    lock does not protect against other processes writing the same store.

    Args:
        store: DocumentStore.
        categories: CategoryService.
        subcategories: SubcategoryService.
        catalog: SystemCatalog used for seeding and the fallback category.
    """

    def __init__(self, store, categories, subcategories, catalog: SystemCatalog):
        self.categories = categories
        self.catalog = catalog
        self.link_repair = LinkRepairEngine(
            store, categories, subcategories, catalog.fallback_category
        )
        self.seeding = SeedingEngine(
            store, categories, subcategories, self.link_repair, catalog
        )
        self.dedup = DeduplicationEngine(
            store, categories, subcategories, self.link_repair
        )

        # owner -> [lock, number of callers holding or waiting for it]
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _owner_lock(self, owner: str):
        with self._locks_guard:
            entry = self._locks.setdefault(owner, [threading.RLock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[owner]

    def sync_system_catalog(self, owner: str) -> SeedReport:
        """Seed the system catalog (additive, idempotent)."""
        with self._owner_lock(owner):
            return self.seeding.seed(owner)

    def force_reset(self, owner: str) -> ResetReport:
        """Deduplicate, then reseed.

        Deduplication runs first so seeding matches against a clean set. When
        the user had no category to re-home orphan subcategories under,
        deduplication runs once more after seeding.
        Batches committed before a failure stay committed; re-running
        completes the reset.
        """
        with self._owner_lock(owner):
            logger.info(f"Force reset of categories for {owner}")
            dedup = self.dedup.deduplicate(owner)
            seed = self.seeding.seed(owner)
            report = ResetReport(dedup=dedup, seed=seed)
            if report.dedup.orphans_kept:
                # Seeding created the fallback category the orphans were waiting for
                report.orphan_cleanup = self.dedup.deduplicate(owner)
            return report

    def deduplicate(self, owner: str) -> DedupReport:
        with self._owner_lock(owner):
            return self.dedup.deduplicate(owner)

    def repair_links(self, owner: str) -> RepairReport:
        with self._owner_lock(owner):
            return self.link_repair.repair(owner)

    def ensure_seeded(self, owner: str) -> List[Category]:
        """List a user's categories, seeding the catalog first if there are none.

        This is the first-access path; CategoryService.find_all stays a pure read.
        """
        with self._owner_lock(owner):
            categories = self.categories.find_all(owner)
            if categories:
                return categories

            logger.info(f"No categories for {owner}, seeding system catalog")
            self.seeding.seed(owner)
            return self.categories.find_all(owner)
