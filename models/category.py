"""Category model for task classification."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

SYSTEM = "system"
CUSTOM = "custom"


@dataclass
class Category:
    """Represents a user-scoped task category.

    Attributes:
        id: Store-assigned identifier.
        owner: User id this category belongs to.
        name: Display name, unique per owner ignoring case.
        kind: "system" for catalog categories, "custom" for user-created ones.
        pinned: True for categories protected from deletion.
        icon: Optional emoji/icon.
        color: Optional color token.
        order: Sort position (lower first).
        active: Whether the category is shown.
        description: Optional free-text description.
        created_at: ISO-8601 creation timestamp.
    """

    id: str
    owner: str
    name: str
    kind: str = CUSTOM
    pinned: bool = False
    icon: Optional[str] = None
    color: Optional[str] = None
    order: int = 0
    active: bool = True
    description: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def is_system(self) -> bool:
        return self.kind == SYSTEM

    @property
    def name_key(self) -> str:
        """Normalized name used for case-insensitive comparisons."""
        return normalize_name(self.name)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Category":
        return cls(
            id=doc["id"],
            owner=doc.get("owner", ""),
            name=doc.get("name", ""),
            kind=doc.get("kind") or CUSTOM,
            pinned=bool(doc.get("pinned", False)),
            icon=doc.get("icon"),
            color=doc.get("color"),
            order=doc.get("order") or 0,
            active=doc.get("active", True),
            description=doc.get("description"),
            created_at=doc.get("created_at"),
        )

    def to_document(self) -> Dict[str, Any]:
        """Convert category to a document for storage (without id)."""
        return {
            "owner": self.owner,
            "name": self.name,
            "kind": self.kind,
            "pinned": self.pinned,
            "icon": self.icon,
            "color": self.color,
            "order": self.order,
            "active": self.active,
            "description": self.description,
            "created_at": self.created_at,
        }


def normalize_name(name: Optional[str]) -> str:
    """Lower-case and trim a name for matching."""
    return (name or "").strip().lower()
