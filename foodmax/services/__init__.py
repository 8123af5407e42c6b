"""Services for FoodMax import."""

from foodmax.services.import_service import ImportPipeline, process_import_batch, reconcile_pending

__all__ = ["ImportPipeline", "process_import_batch", "reconcile_pending"]
