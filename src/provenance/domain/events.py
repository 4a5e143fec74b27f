"""Domain events for the provenance tracker."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Event:
    """Base class for domain events; any number of handlers may react."""


@dataclass
class ProductRegistered(Event):
    """Event raised when a product has been added to the registry."""
    product_id: str
    name: str
    batch_number: str
    manufacturer: str
    assigned_actor: str
    registered_at: datetime


@dataclass
class StatusUpdated(Event):
    """Event raised when a product passes a delivery checkpoint."""
    product_id: str
    status: str  # ProductStatus name, e.g. "IN_TRANSIT"
    actor: str
    latitude: float
    longitude: float
    updated_at: datetime


@dataclass
class ProductFlagged(Event):
    """Event raised each time a product is reported as suspected counterfeit."""
    product_id: str
    actor: str
    flagged_at: datetime
