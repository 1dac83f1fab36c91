"""Category/subcategory reconciliation: seeding, deduplication and link repair."""

from reconciliation.orchestrator import ReconciliationService, ResetReport

__all__ = ["ReconciliationService", "ResetReport"]
