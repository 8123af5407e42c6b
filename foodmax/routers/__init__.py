"""API routers for FoodMax."""

from foodmax.routers import import_router

__all__ = ["import_router"]
