"""Repair of task references to categories and subcategories.

Tasks hold a category id and an optional subcategory id. Deletions,
deduplication and reseeding can leave those ids pointing at records that no
longer exist. The repair pass visits every task of a user and rewrites only
the references that are broken:

- ids listed in a remap table (deleted duplicate -> survivor) are replaced
  by their survivor;
- a subcategory id that does not resolve is cleared;
- a category id that does not resolve is replaced by the parent of the
  task's (still valid) subcategory, or else by the fallback category;
- a subcategory that belongs to a different category than the task is
  cleared.

Tasks are never deleted and tasks with valid references are not written.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from logger import get_logger
from models.task import Task
from services.resolution import choose_fallback
from services.tasks import TASKS

logger = get_logger(__name__)


@dataclass
class RepairReport:
    """Outcome of one link repair pass."""

    tasks_scanned: int = 0
    tasks_updated: int = 0
    categories_remapped: int = 0
    categories_relinked: int = 0
    subcategories_remapped: int = 0
    subcategories_cleared: int = 0
    unresolved: int = 0


class LinkRepairEngine:
    """Fixes dangling category/subcategory references on a user's tasks.

    Args:
        store: DocumentStore.
        categories: CategoryService.
        subcategories: SubcategoryService.
        fallback_name: Preferred category for tasks whose category is gone.
    """

    def __init__(self, store, categories, subcategories, fallback_name: Optional[str] = None):
        self.store = store
        self.categories = categories
        self.subcategories = subcategories
        self.fallback_name = fallback_name

    def repair(
        self,
        owner: str,
        category_remap: Optional[Dict[str, str]] = None,
        subcategory_remap: Optional[Dict[str, str]] = None,
    ) -> RepairReport:
        """Repair every task owned by a user.

        Args:
            owner: User id.
            category_remap: Deleted category id -> surviving category id.
            subcategory_remap: Deleted subcategory id -> surviving subcategory id.

        Returns:
            RepairReport with counts of what changed.
        """
        category_remap = category_remap or {}
        subcategory_remap = subcategory_remap or {}
        report = RepairReport()

        categories = self.categories.find_all(owner)
        category_ids = {c.id for c in categories}
        parent_of = {
            sub.id: sub.category_id
            for sub in self.subcategories.find_all_for_owner(owner)
        }
        fallback = choose_fallback(categories, self.fallback_name)

        if fallback is None:
            logger.warning(f"User {owner} has no categories; dangling tasks stay as-is")

        for doc in self.store.query(TASKS, "owner", owner):
            task = Task.from_document(doc)
            report.tasks_scanned += 1

            category_id = task.category_id
            subcategory_id = task.subcategory_id

            if category_id in category_remap:
                category_id = category_remap[category_id]
                report.categories_remapped += 1

            if subcategory_id in subcategory_remap:
                subcategory_id = subcategory_remap[subcategory_id]
                report.subcategories_remapped += 1

            if subcategory_id and subcategory_id not in parent_of:
                subcategory_id = None
                report.subcategories_cleared += 1

            if category_id not in category_ids:
                if subcategory_id:
                    category_id = parent_of[subcategory_id]
                    report.categories_relinked += 1
                elif fallback is not None:
                    category_id = fallback.id
                    report.categories_relinked += 1
                else:
                    report.unresolved += 1

            # A subcategory must live under the task's own category
            if subcategory_id and parent_of[subcategory_id] != category_id:
                subcategory_id = None
                report.subcategories_cleared += 1

            changes = {}
            if category_id != task.category_id:
                changes["category_id"] = category_id
            if subcategory_id != task.subcategory_id:
                changes["subcategory_id"] = subcategory_id

            if changes:
                self.store.update(TASKS, task.id, changes)
                report.tasks_updated += 1
                logger.debug(f"Repaired task {task.id}: {changes}")

        logger.info(
            f"Link repair for {owner}: {report.tasks_updated}/{report.tasks_scanned} "
            f"task(s) updated, {report.unresolved} unresolved"
        )
        return report
