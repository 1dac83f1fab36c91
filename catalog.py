"""System category catalog loading.

The catalog is the fixed, versioned taxonomy every user gets: an ordered list
of categories, each with display metadata and an ordered list of subcategory
names. It lives in a YAML file and is loaded into immutable objects that are
handed to the seeding engine explicitly.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from config import get_default_catalog_path
from logger import get_logger
from models.category import normalize_name

logger = get_logger(__name__)


@dataclass(frozen=True)
class CatalogCategory:
    """One system category and its subcategory names, in catalog order."""

    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    subcategories: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SystemCatalog:
    """Immutable system taxonomy.

    Attributes:
        version: Catalog version string, logged on every seeding run.
        categories: Categories in catalog order; the index is the seeded order.
        fallback_category: Name of the category used to re-home tasks whose
            category no longer exists.
    """

    version: str
    categories: Tuple[CatalogCategory, ...]
    fallback_category: Optional[str] = None

    def __len__(self) -> int:
        return len(self.categories)

    def __iter__(self):
        return iter(self.categories)

    def find(self, name: str) -> Optional[CatalogCategory]:
        """Find a catalog category by name, ignoring case and surrounding spaces."""
        key = normalize_name(name)
        for entry in self.categories:
            if normalize_name(entry.name) == key:
                return entry
        return None

    @property
    def subcategory_count(self) -> int:
        return sum(len(entry.subcategories) for entry in self.categories)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SystemCatalog":
        """Build a catalog from its parsed YAML form.

        Raises:
            ValueError: If a name is missing or duplicated.
        """
        if not isinstance(data, dict):
            raise ValueError("Catalog must be a mapping")

        entries = []
        seen = set()
        for raw in data.get("categories") or []:
            name = (raw.get("name") or "").strip()
            if not name:
                raise ValueError("Catalog category without a name")
            if normalize_name(name) in seen:
                raise ValueError(f"Duplicate catalog category: {name}")
            seen.add(normalize_name(name))

            subcategories = []
            seen_subs = set()
            for sub_name in raw.get("subcategories") or []:
                sub_name = str(sub_name).strip()
                if not sub_name:
                    raise ValueError(f"Empty subcategory name under {name}")
                if normalize_name(sub_name) in seen_subs:
                    raise ValueError(f"Duplicate subcategory {sub_name} under {name}")
                seen_subs.add(normalize_name(sub_name))
                subcategories.append(sub_name)

            entries.append(
                CatalogCategory(
                    name=name,
                    icon=raw.get("icon"),
                    color=raw.get("color"),
                    subcategories=tuple(subcategories),
                )
            )

        return cls(
            version=str(data.get("version", "unknown")),
            categories=tuple(entries),
            fallback_category=data.get("fallback_category"),
        )


_cache: Dict[Path, SystemCatalog] = {}


def load_catalog(path: Optional[Path] = None) -> SystemCatalog:
    """Load a system catalog from a YAML file.

    Args:
        path: Catalog file. Defaults to db/seed/system_catalog.yaml.

    Returns:
        The parsed SystemCatalog (cached per path).

    Raises:
        FileNotFoundError: If the catalog file doesn't exist.
        ValueError: If the catalog is malformed.
    """
    catalog_path = Path(path) if path else get_default_catalog_path()

    if catalog_path in _cache:
        return _cache[catalog_path]

    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {catalog_path}")

    logger.info(f"Loading system catalog from {catalog_path}")

    with open(catalog_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    catalog = SystemCatalog.from_dict(data)
    _cache[catalog_path] = catalog
    return catalog
