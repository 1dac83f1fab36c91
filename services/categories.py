"""Category service for document store operations."""

from typing import List, Optional

from errors import InvalidOperation, NotFound, ProtectedRecord
from logger import get_logger
from models.category import CUSTOM, Category, normalize_name

logger = get_logger(__name__)

CATEGORIES = "categories"
SUBCATEGORIES = "subcategories"

_UPDATABLE_FIELDS = {
    "name",
    "kind",
    "pinned",
    "icon",
    "color",
    "order",
    "active",
    "description",
}


def sort_by_order(records):
    """Sort records by their order field; ties keep their incoming order."""
    return sorted(records, key=lambda r: r.order or 0)


class CategoryService:
    """Service for managing a user's categories."""

    def __init__(self, store):
        """Initialize the category service.

        Args:
            store: DocumentStore instance.
        """
        self.store = store

    def find_all(self, owner: str) -> List[Category]:
        """Get all categories owned by a user.

        This is a pure read: it never seeds. Use
        ReconciliationService.ensure_seeded for the first-access flow.

        Returns:
            List of Category objects, ordered by their order field.
        """
        docs = self.store.query(CATEGORIES, "owner", owner)
        return sort_by_order(Category.from_document(doc) for doc in docs)

    def find(self, category_id: str) -> Optional[Category]:
        """Get a single category by ID.

        Returns:
            Category object if found, None otherwise.
        """
        if not category_id:
            return None
        doc = self.store.get(CATEGORIES, category_id)
        return Category.from_document(doc) if doc else None

    def find_by_name(self, owner: str, name: str) -> Optional[Category]:
        """Get a user's category by name, ignoring case and surrounding spaces.

        Returns:
            The first matching Category by order, or None.
        """
        key = normalize_name(name)
        for category in self.find_all(owner):
            if category.name_key == key:
                return category
        return None

    def create(
        self,
        owner: str,
        name: str,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Category:
        """Create a new custom category.

        Custom categories are unpinned and placed at the end (order 99).

        Raises:
            ValueError: If the name is empty.
            InvalidOperation: If the owner already has a category with this name.
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Category name cannot be empty")

        if self.find_by_name(owner, name):
            raise InvalidOperation(f"Category '{name}' already exists")

        doc = self.store.create(
            CATEGORIES,
            {
                "owner": owner,
                "name": name,
                "kind": CUSTOM,
                "pinned": False,
                "icon": icon,
                "color": color,
                "order": 99,
                "active": True,
                "description": description,
            },
        )
        logger.info(f"Created category '{name}' ({doc['id']}) for {owner}")
        return Category.from_document(doc)

    def update(self, category_id: str, **fields) -> Category:
        """Update fields of an existing category.

        Args:
            category_id: The category ID to update.
            **fields: Fields to change. Supported: name, kind, pinned, icon,
                color, order, active, description.

        Returns:
            The updated Category object.

        Raises:
            ValueError: If unsupported fields are given.
            NotFound: If the category doesn't exist.
            InvalidOperation: If the update would change the category's kind
                or rename it onto another category's name.
        """
        invalid_fields = set(fields) - _UPDATABLE_FIELDS
        if invalid_fields:
            raise ValueError(f"Unsupported field names: {invalid_fields}")

        current = self.find(category_id)
        if current is None:
            raise NotFound(f"Category with ID {category_id} not found")

        if "kind" in fields and fields["kind"] != current.kind:
            raise InvalidOperation("Cannot change the kind of a category")

        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValueError("Category name cannot be empty")
            key = normalize_name(fields["name"])
            if any(
                c.name_key == key and c.id != category_id
                for c in self.find_all(current.owner)
            ):
                raise InvalidOperation(f"Category '{fields['name']}' already exists")

        if fields:
            self.store.update(CATEGORIES, category_id, fields)

        return self.find(category_id)

    def delete(self, category_id: str) -> bool:
        """Delete a custom category and its subcategories.

        Returns:
            True if the category was deleted, False if not found.

        Raises:
            ProtectedRecord: If the category is a system category.
        """
        category = self.find(category_id)
        if category is None:
            return False

        if category.is_system:
            raise ProtectedRecord(
                f"System category '{category.name}' cannot be deleted"
            )

        batch = self.store.batch()
        for sub in self.store.query(SUBCATEGORIES, "category_id", category_id):
            batch.delete(SUBCATEGORIES, sub["id"])
        batch.delete(CATEGORIES, category_id)
        batch.commit()

        logger.info(f"Deleted category '{category.name}' ({category_id})")
        return True
