"""Commands for the provenance tracker."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Command:
    """Base class for tracker commands; each has exactly one handler."""


@dataclass
class RegisterProduct(Command):
    """Command to register a new product with the tracker."""
    name: str
    manufacturer: str
    distributor: str
    retailer: str
    assigned_actor: str
    latitude: float
    longitude: float
    product_id: Optional[str] = None  # Generated when not supplied
    batch_number: Optional[str] = None  # "BATCH" + random 4 digits when not supplied


@dataclass
class UpdateStatusByToken(Command):
    """Command to move the product identified by a scanned token to a new status."""
    token: str
    new_status: str
    actor: str


@dataclass
class SubmitScannedUpdate(Command):
    """Command to update a selected product, authenticated by its scanned token."""
    product_id: str
    token: str
    new_status: str
    actor: str


@dataclass
class FlagProduct(Command):
    """Command raised when a customer reports a product as suspected counterfeit."""
    product_id: str
    actor: str
