"""Subcategory model, nested under exactly one category.

The owner is copied from the parent category so a subcategory whose parent
is gone can still be traced back to its user.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from models.category import normalize_name


@dataclass
class Subcategory:
    id: str
    category_id: str
    name: str
    owner: Optional[str] = None
    pinned: bool = False
    icon: Optional[str] = None
    color: Optional[str] = None
    order: int = 0
    active: bool = True
    description: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def name_key(self) -> str:
        return normalize_name(self.name)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Subcategory":
        return cls(
            id=doc["id"],
            category_id=doc.get("category_id", ""),
            name=doc.get("name", ""),
            owner=doc.get("owner"),
            pinned=bool(doc.get("pinned", False)),
            icon=doc.get("icon"),
            color=doc.get("color"),
            order=doc.get("order") or 0,
            active=doc.get("active", True),
            description=doc.get("description"),
            created_at=doc.get("created_at"),
        )

    def to_document(self) -> Dict[str, Any]:
        """Convert subcategory to a document for storage (without id)."""
        return {
            "category_id": self.category_id,
            "name": self.name,
            "owner": self.owner,
            "pinned": self.pinned,
            "icon": self.icon,
            "color": self.color,
            "order": self.order,
            "active": self.active,
            "description": self.description,
            "created_at": self.created_at,
        }
