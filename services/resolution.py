"""Resolution of free-text category names to category ids.

The task-creation layer only knows category and subcategory names. This
module maps those names onto the user's current records and applies an
explicit fallback policy when a name does not match anything.
"""

from dataclasses import dataclass
from typing import List, Optional

from errors import NotFound
from models.category import Category, normalize_name
from models.subcategory import Subcategory


@dataclass
class Placement:
    """Where a task ends up after name resolution.

    Attributes:
        category_id: Resolved category id (None only if the user has no categories).
        subcategory_id: Resolved subcategory id, or None.
        matched: False when the category came from the fallback policy.
    """

    category_id: Optional[str]
    subcategory_id: Optional[str] = None
    matched: bool = True


def choose_fallback(
    categories: List[Category], fallback_name: Optional[str]
) -> Optional[Category]:
    """Pick the category that receives tasks with no usable category.

    Prefers the category named fallback_name, then the first one by order.
    """
    if not categories:
        return None
    if fallback_name:
        key = normalize_name(fallback_name)
        for category in categories:
            if category.name_key == key:
                return category
    return min(categories, key=lambda c: c.order or 0)


class CategoryResolver:
    """Resolves category/subcategory names for a user.

    Args:
        categories: CategoryService.
        subcategories: SubcategoryService.
        fallback_name: Preferred fallback category name (usually from the catalog).
    """

    def __init__(self, categories, subcategories, fallback_name: Optional[str] = None):
        self.categories = categories
        self.subcategories = subcategories
        self.fallback_name = fallback_name

    def match_category(self, owner: str, name: Optional[str]) -> Category:
        """Find a category by exact case-insensitive name.

        Raises:
            NotFound: If no category matches.
        """
        if name and name.strip():
            found = self.categories.find_by_name(owner, name)
            if found:
                return found
        raise NotFound(f"No category named '{name}'")

    def match_subcategory(self, category_id: str, name: Optional[str]) -> Subcategory:
        """Find a subcategory by name: exact match first, then substring.

        Raises:
            NotFound: If no subcategory matches.
        """
        key = normalize_name(name)
        if key:
            candidates = self.subcategories.find_by_category(category_id)
            for sub in candidates:
                if sub.name_key == key:
                    return sub
            for sub in candidates:
                if key in sub.name_key:
                    return sub
        raise NotFound(f"No subcategory named '{name}' in {category_id}")

    def resolve(
        self,
        owner: str,
        category_name: Optional[str],
        subcategory_name: Optional[str] = None,
    ) -> Placement:
        """Resolve names to ids, falling back when the category is unknown.

        A subcategory is only looked up under a matched category; under a
        fallback category it is left unset.
        """
        try:
            category = self.match_category(owner, category_name)
        except NotFound:
            fallback = choose_fallback(
                self.categories.find_all(owner), self.fallback_name
            )
            return Placement(
                category_id=fallback.id if fallback else None, matched=False
            )

        subcategory_id = None
        if subcategory_name:
            try:
                subcategory_id = self.match_subcategory(category.id, subcategory_name).id
            except NotFound:
                subcategory_id = None

        return Placement(category_id=category.id, subcategory_id=subcategory_id)
