"""Subcategory service for document store operations."""

from typing import List, Optional

from errors import InvalidOperation, NotFound, ProtectedRecord
from logger import get_logger
from models.category import normalize_name
from models.subcategory import Subcategory
from services.categories import CATEGORIES, SUBCATEGORIES, sort_by_order

logger = get_logger(__name__)

_UPDATABLE_FIELDS = {
    "name",
    "pinned",
    "icon",
    "color",
    "order",
    "active",
    "description",
}


class SubcategoryService:
    """Service for managing subcategories scoped to a category."""

    def __init__(self, store):
        """Initialize the subcategory service.

        Args:
            store: DocumentStore instance.
        """
        self.store = store

    def find_by_category(self, category_id: str) -> List[Subcategory]:
        """Get all subcategories of a category, ordered by their order field."""
        if not category_id:
            return []
        docs = self.store.query(SUBCATEGORIES, "category_id", category_id)
        return sort_by_order(Subcategory.from_document(doc) for doc in docs)

    def find_all_for_owner(self, owner: str) -> List[Subcategory]:
        """Get every subcategory under any of a user's categories."""
        subcategories = []
        for doc in self.store.query(CATEGORIES, "owner", owner):
            subcategories.extend(self.find_by_category(doc["id"]))
        return subcategories

    def find_orphans(self, owner: str) -> List[Subcategory]:
        """Get a user's subcategories whose parent category no longer exists."""
        category_ids = {doc["id"] for doc in self.store.query(CATEGORIES, "owner", owner)}
        return [
            Subcategory.from_document(doc)
            for doc in self.store.query(SUBCATEGORIES, "owner", owner)
            if doc.get("category_id") not in category_ids
        ]

    def find(self, subcategory_id: str) -> Optional[Subcategory]:
        if not subcategory_id:
            return None
        doc = self.store.get(SUBCATEGORIES, subcategory_id)
        return Subcategory.from_document(doc) if doc else None

    def find_by_name(self, category_id: str, name: str) -> Optional[Subcategory]:
        """Get a subcategory by name within a category, ignoring case."""
        key = normalize_name(name)
        for sub in self.find_by_category(category_id):
            if sub.name_key == key:
                return sub
        return None

    def create(
        self,
        category_id: str,
        name: str,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Subcategory:
        """Create an unpinned subcategory at the end of its category.

        Raises:
            ValueError: If the name is empty.
            NotFound: If the parent category doesn't exist.
            InvalidOperation: If the category already has a subcategory with this name.
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Subcategory name cannot be empty")

        parent = self.store.get(CATEGORIES, category_id)
        if parent is None:
            raise NotFound(f"Category with ID {category_id} not found")

        if self.find_by_name(category_id, name):
            raise InvalidOperation(f"Subcategory '{name}' already exists")

        doc = self.store.create(
            SUBCATEGORIES,
            {
                "category_id": category_id,
                "name": name,
                "owner": parent.get("owner"),
                "pinned": False,
                "icon": icon,
                "color": color,
                "order": 99,
                "active": True,
                "description": description,
            },
        )
        logger.info(f"Created subcategory '{name}' ({doc['id']}) in {category_id}")
        return Subcategory.from_document(doc)

    def update(self, subcategory_id: str, **fields) -> Subcategory:
        """Update fields of an existing subcategory.

        Raises:
            ValueError: If unsupported fields are given or the name is empty.
            NotFound: If the subcategory doesn't exist.
            InvalidOperation: If the new name is taken within the category.
        """
        invalid_fields = set(fields) - _UPDATABLE_FIELDS
        if invalid_fields:
            raise ValueError(f"Unsupported field names: {invalid_fields}")

        current = self.find(subcategory_id)
        if current is None:
            raise NotFound(f"Subcategory with ID {subcategory_id} not found")

        if "name" in fields:
            fields["name"] = (fields["name"] or "").strip()
            if not fields["name"]:
                raise ValueError("Subcategory name cannot be empty")
            key = normalize_name(fields["name"])
            if any(
                s.name_key == key and s.id != subcategory_id
                for s in self.find_by_category(current.category_id)
            ):
                raise InvalidOperation(f"Subcategory '{fields['name']}' already exists")

        if fields:
            self.store.update(SUBCATEGORIES, subcategory_id, fields)

        return self.find(subcategory_id)

    def delete(self, subcategory_id: str) -> bool:
        """Delete an unpinned subcategory.

        Returns:
            True if deleted, False if not found.

        Raises:
            ProtectedRecord: If the subcategory is pinned.
        """
        sub = self.find(subcategory_id)
        if sub is None:
            return False

        if sub.pinned:
            raise ProtectedRecord(f"Pinned subcategory '{sub.name}' cannot be deleted")

        deleted = self.store.delete(SUBCATEGORIES, subcategory_id)
        if deleted:
            logger.info(f"Deleted subcategory '{sub.name}' ({subcategory_id})")
        return deleted
