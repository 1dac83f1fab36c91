"""Base services container for dependency injection."""

from catalog import SystemCatalog, load_catalog
from config import Config
from db.manager import DatabaseManager
from db.store import DocumentStore


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject a test database or catalog.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, the
            database settings of config are ignored.
        catalog: Optional system catalog. Defaults to the catalog configured
            in config (or the bundled one).
    """

    def __init__(self, config: Config, db_manager=None, catalog: SystemCatalog = None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)
        self.store = DocumentStore(self.db_manager)
        self.catalog = catalog or load_catalog(config.catalog_path)

        # Lazy import to avoid circular dependencies
        from services.categories import CategoryService
        from services.subcategories import SubcategoryService
        from services.tasks import TaskService
        from services.resolution import CategoryResolver
        from reconciliation import ReconciliationService

        self.categories = CategoryService(self.store)
        self.subcategories = SubcategoryService(self.store)
        self.tasks = TaskService(self.store)
        self.resolver = CategoryResolver(
            self.categories, self.subcategories, self.catalog.fallback_category
        )
        self.reconciliation = ReconciliationService(
            self.store, self.categories, self.subcategories, self.catalog
        )
