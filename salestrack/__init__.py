"""Sales and upsell event tracking service."""

__version__ = "0.1.0"
SERVICE_NAME = "salestrack"
