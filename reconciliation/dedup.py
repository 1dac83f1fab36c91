"""Collapsing of same-name duplicate categories and subcategories.

Duplicates are grouped by trimmed, lower-cased name (categories per user,
subcategories per category). One survivor is kept per group, chosen
deterministically: lowest order, then earliest created_at, then lowest id.

Subcategories whose category no longer exists are moved to the fallback
category, and subcategories of a deleted duplicate move to its survivor,
before the subcategory pass runs, so nothing is left orphaned. Every
deleted id is recorded against its survivor, and the link repair pass uses
that table to move tasks onto the survivor of the same name.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from logger import get_logger
from models.category import SYSTEM
from reconciliation.link_repair import RepairReport
from services.categories import CATEGORIES, SUBCATEGORIES
from services.resolution import choose_fallback

logger = get_logger(__name__)


def survivor_key(record):
    """Sort key choosing which duplicate survives (smallest wins)."""
    return (record.order or 0, record.created_at or "", record.id)


def group_by_name(records) -> Dict[str, List]:
    groups: Dict[str, List] = {}
    for record in records:
        groups.setdefault(record.name_key, []).append(record)
    return groups


@dataclass
class DedupReport:
    """Outcome of one deduplication run."""

    categories_removed: int = 0
    subcategories_removed: int = 0
    subcategories_reparented: int = 0
    orphans_reparented: int = 0
    orphans_kept: int = 0
    category_remap: Dict[str, str] = field(default_factory=dict)
    subcategory_remap: Dict[str, str] = field(default_factory=dict)
    link_repair: Optional[RepairReport] = None


class DeduplicationEngine:
    """Removes duplicate categories/subcategories for a user.

    Args:
        store: DocumentStore.
        categories: CategoryService.
        subcategories: SubcategoryService.
        link_repair: LinkRepairEngine run with the remap tables afterwards.
    """

    def __init__(self, store, categories, subcategories, link_repair):
        self.store = store
        self.categories = categories
        self.subcategories = subcategories
        self.link_repair = link_repair

    def deduplicate(self, owner: str) -> DedupReport:
        """Deduplicate a user's taxonomy in one batch, then repair task links."""
        report = DedupReport()
        batch = self.store.batch()

        categories = self.categories.find_all(owner)
        subs_by_category = {
            c.id: self.subcategories.find_by_category(c.id) for c in categories
        }

        # Orphans go first so the passes below can merge them like any other subcategory
        orphans = self.subcategories.find_orphans(owner)
        fallback = choose_fallback(categories, self.link_repair.fallback_name)
        if orphans and fallback is None:
            logger.warning(
                f"User {owner} has no categories; {len(orphans)} orphan subcategories kept"
            )
            report.orphans_kept = len(orphans)
        elif orphans:
            for orphan in orphans:
                batch.update(SUBCATEGORIES, orphan.id, {"category_id": fallback.id})
                subs_by_category[fallback.id].append(
                    replace(orphan, category_id=fallback.id)
                )
                report.orphans_reparented += 1
                logger.debug(
                    f"Moving orphan subcategory '{orphan.name}' ({orphan.id}) "
                    f"to '{fallback.name}'"
                )

        for members in group_by_name(categories).values():
            if len(members) < 2:
                continue

            survivor, *duplicates = sorted(members, key=survivor_key)

            # Keep protection if any copy was a system category
            if not survivor.is_system and any(d.is_system for d in duplicates):
                batch.update(CATEGORIES, survivor.id, {"kind": SYSTEM, "pinned": True})

            for duplicate in duplicates:
                for sub in subs_by_category.pop(duplicate.id):
                    batch.update(SUBCATEGORIES, sub.id, {"category_id": survivor.id})
                    subs_by_category[survivor.id].append(
                        replace(sub, category_id=survivor.id)
                    )
                    report.subcategories_reparented += 1

                batch.delete(CATEGORIES, duplicate.id)
                report.category_remap[duplicate.id] = survivor.id
                report.categories_removed += 1
                logger.debug(
                    f"Removing duplicate category '{duplicate.name}' "
                    f"({duplicate.id} -> {survivor.id})"
                )

        for subs in subs_by_category.values():
            for members in group_by_name(subs).values():
                if len(members) < 2:
                    continue

                survivor, *duplicates = sorted(members, key=survivor_key)

                if not survivor.pinned and any(d.pinned for d in duplicates):
                    batch.update(SUBCATEGORIES, survivor.id, {"pinned": True})

                for duplicate in duplicates:
                    batch.delete(SUBCATEGORIES, duplicate.id)
                    report.subcategory_remap[duplicate.id] = survivor.id
                    report.subcategories_removed += 1
                    logger.debug(
                        f"Removing duplicate subcategory '{duplicate.name}' "
                        f"({duplicate.id} -> {survivor.id})"
                    )

        batch.commit()

        logger.info(
            f"Deduplication for {owner}: {report.categories_removed} categories "
            f"and {report.subcategories_removed} subcategories removed"
        )

        report.link_repair = self.link_repair.repair(
            owner, report.category_remap, report.subcategory_remap
        )
        return report
