"""FoodMax back-office import and reconciliation service."""

__version__ = "0.1.0"
