"""
Provenance Domain Model
Products, their delivery lifecycle and the ledger entries they produce
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Tuple, Union

from provenance.domain import events
from provenance.domain.exceptions import InvalidStatusError
from provenance.domain.identity import derive_token

# Simulated GPS noise per checkpoint, degrees in each axis
LOCATION_JITTER_DEGREES = 0.00075

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now() -> datetime:
    """Wall-clock time at second resolution."""
    return datetime.now().replace(microsecond=0)


def format_timestamp(at: datetime) -> str:
    return at.strftime(TIMESTAMP_FORMAT)


def generate_batch_number(rng: random.Random) -> str:
    return f"BATCH{rng.randint(1000, 9999)}"


class ProductStatus(Enum):
    """Delivery lifecycle states, valued by their display label"""
    REGISTERED = "Registered"
    PICKED_UP = "Picked Up"
    IN_TRANSIT = "In Transit"
    DELIVERED = "Delivered"

    @classmethod
    def parse(cls, value: Union[str, ProductStatus]) -> ProductStatus:
        """
        Accept a status, its name or its label in any case.

        "DELIVERED", "Delivered", "in transit" and "in_transit" all resolve.
        """
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper().replace(" ", "_").replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            raise InvalidStatusError(f"Unknown product status: {value!r}") from None


class EventKind(str, Enum):
    """Kinds of ledger entries"""
    REGISTERED = "REGISTERED"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    FLAGGED = "FLAGGED"

    @classmethod
    def for_status(cls, status: ProductStatus) -> EventKind:
        return cls[status.name]


@dataclass(frozen=True)
class LedgerEntry:
    """Single append-only audit record; sequence is the order key"""
    sequence: int
    timestamp: datetime
    event_kind: EventKind
    product_id: str
    actor: str
    description: str


@dataclass(eq=False)
class Product:
    """
    Unit of provenance tracking.

    Identity is the product_id; registry lookups compare objects by identity,
    so equality is not derived from the mutable fields.
    """
    product_id: str
    name: str
    batch_number: str
    manufacturer: str
    distributor: str
    retailer: str
    assigned_actor: str
    latitude: float
    longitude: float
    status: ProductStatus = ProductStatus.REGISTERED
    flagged: bool = False
    timeline: List[str] = field(default_factory=list)
    events: List = field(default_factory=list, repr=False)

    @property
    def location(self) -> Tuple[float, float]:
        return self.latitude, self.longitude

    def qr_string(self) -> str:
        """Token shown to delivery actors, derived from the immutable fields."""
        return derive_token(self.product_id, self.name, self.batch_number)

    def register(self, at: datetime) -> str:
        """
        Seed the timeline with the creation entry and generate domain event.

        Returns:
            The timeline line that was appended
        """
        line = f"{format_timestamp(at)} - CREATED - {self.product_id}"
        self.timeline.append(line)
        self.events.append(
            events.ProductRegistered(
                product_id=self.product_id,
                name=self.name,
                batch_number=self.batch_number,
                manufacturer=self.manufacturer,
                assigned_actor=self.assigned_actor,
                registered_at=at,
            )
        )
        return line

    def apply_status_update(
        self,
        new_status: Union[str, ProductStatus],
        actor: str,
        rng: random.Random,
        at: datetime,
    ) -> str:
        """
        Move the product to new_status and simulate movement to the checkpoint.

        Any status may follow any other; the lifecycle order is a convention of
        the callers, not enforced here.

        Returns:
            The timeline line that was appended, which doubles as the ledger text
        """
        status = ProductStatus.parse(new_status)
        line = f"{format_timestamp(at)} - {status.value.upper()} - {self.product_id} by {actor}"

        self.status = status
        self.timeline.append(line)
        self.latitude += rng.uniform(-LOCATION_JITTER_DEGREES, LOCATION_JITTER_DEGREES)
        self.longitude += rng.uniform(-LOCATION_JITTER_DEGREES, LOCATION_JITTER_DEGREES)

        self.events.append(
            events.StatusUpdated(
                product_id=self.product_id,
                status=status.name,
                actor=actor,
                latitude=self.latitude,
                longitude=self.longitude,
                updated_at=at,
            )
        )
        return line

    def snapshot(self) -> ProductSnapshot:
        """Frozen copy of the current state for callers outside the unit of work."""
        return ProductSnapshot(
            product_id=self.product_id,
            name=self.name,
            batch_number=self.batch_number,
            manufacturer=self.manufacturer,
            distributor=self.distributor,
            retailer=self.retailer,
            assigned_actor=self.assigned_actor,
            latitude=self.latitude,
            longitude=self.longitude,
            status=self.status,
            flagged=self.flagged,
            timeline=tuple(self.timeline),
        )

    def flag(self, actor: str, at: datetime) -> str:
        """Mark as suspected counterfeit. Repeated reports are all recorded."""
        line = f"{format_timestamp(at)} - FLAGGED BY CUSTOMER"
        self.flagged = True
        self.timeline.append(line)
        self.events.append(
            events.ProductFlagged(product_id=self.product_id, actor=actor, flagged_at=at)
        )
        return line


@dataclass(frozen=True)
class ProductSnapshot:
    """Read model of a product as of one unit of work; later updates do not reach it"""
    product_id: str
    name: str
    batch_number: str
    manufacturer: str
    distributor: str
    retailer: str
    assigned_actor: str
    latitude: float
    longitude: float
    status: ProductStatus
    flagged: bool
    timeline: Tuple[str, ...]

    @property
    def location(self) -> Tuple[float, float]:
        return self.latitude, self.longitude

    def qr_string(self) -> str:
        return derive_token(self.product_id, self.name, self.batch_number)
