"""
Views for read operations - separate from command/write path.

Every view runs inside a unit of work, so it reads the registry and ledger
under the store lock and sees a consistent snapshot.
"""
import logging
from typing import List, Optional, Tuple

from provenance.domain.exceptions import NotFoundError
from provenance.domain.model import LedgerEntry, ProductSnapshot
from provenance.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


def get_product(product_id: str, uow: AbstractUnitOfWork) -> Optional[ProductSnapshot]:
    with uow:
        product = uow.products.get(product_id)
        return product.snapshot() if product is not None else None


def list_products(uow: AbstractUnitOfWork) -> List[ProductSnapshot]:
    """All products in registration order."""
    with uow:
        return [p.snapshot() for p in uow.products.list()]


def lookup_by_token(token: str, uow: AbstractUnitOfWork) -> Optional[ProductSnapshot]:
    """Resolve a scanned QR string to its product, or None if not recognized."""
    with uow:
        product = uow.products.find_by_token(token)
        if product is not None:
            product = product.snapshot()

    if product is None:
        logger.info("Scan returned no product")
    else:
        logger.info(f"Product {product.product_id} validated on ledger")
    return product


def list_assigned(actor_name: str, uow: AbstractUnitOfWork) -> List[ProductSnapshot]:
    """Products whose delivery handler matches actor_name, ignoring case."""
    wanted = (actor_name or "").lower()
    with uow:
        return [
            p.snapshot() for p in uow.products.list()
            if p.assigned_actor is not None and p.assigned_actor.lower() == wanted
        ]


def ledger_snapshot(uow: AbstractUnitOfWork) -> Tuple[LedgerEntry, ...]:
    """Full ledger history in append order."""
    with uow:
        return uow.ledger.entries()


def provenance_for(product_id: str, uow: AbstractUnitOfWork) -> str:
    """
    Render the provenance report for a product id.

    Raises:
        NotFoundError: If no product has the given id
    """
    with uow:
        product = uow.products.get(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return render_provenance(product.snapshot())


def render_provenance(product: ProductSnapshot) -> str:
    """Descriptive fields followed by the full timeline, oldest first."""
    lines = [
        f"Product: {product.name}",
        f"ID: {product.product_id}",
        f"Batch: {product.batch_number}",
        f"Manufacturer: {product.manufacturer}",
        f"Distributor: {product.distributor}",
        f"Retailer: {product.retailer}",
        f"Current Status: {product.status.value}",
        f"Assigned Delivery Person: {product.assigned_actor}",
        f"Last Known Location: {product.latitude:.5f}, {product.longitude:.5f}",
        f"Flagged: {'Yes' if product.flagged else 'No'}",
        "",
        "Blockchain Transaction Timeline:",
    ]
    lines.extend(f" - {entry}" for entry in product.timeline)
    return "\n".join(lines) + "\n"
