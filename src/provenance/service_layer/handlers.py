import logging

import config
from provenance.domain import model
from provenance.domain.commands import (
    FlagProduct,
    RegisterProduct,
    SubmitScannedUpdate,
    UpdateStatusByToken,
)
from provenance.domain.events import ProductFlagged
from provenance.domain.exceptions import NotFoundError, TokenMismatchError
from provenance.domain.identity import verify_token
from provenance.domain.model import EventKind, Product, ProductStatus
from provenance.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


def register_product(command: RegisterProduct, uow: AbstractUnitOfWork) -> str:
    """
    Register a product and record it on the ledger.

    Flow:
    1. Resolve id and batch number (generated when not supplied)
    2. Add product to the registry (fails on duplicate id)
    3. Seed the timeline and append the REGISTERED ledger entry
    4. Commit

    Returns:
        product_id: The id of the registered product

    Raises:
        DuplicateIdError: If the id is already registered
    """
    with uow:
        product_id = command.product_id
        if product_id is None:
            product_id = uow.products.next_id()
        batch_number = command.batch_number
        if batch_number is None:
            batch_number = model.generate_batch_number(uow.rng)

        product = Product(
            product_id=product_id,
            name=command.name,
            batch_number=batch_number,
            manufacturer=command.manufacturer,
            distributor=command.distributor,
            retailer=command.retailer,
            assigned_actor=command.assigned_actor,
            latitude=float(command.latitude),
            longitude=float(command.longitude),
        )
        uow.products.add(product)

        at = model.now()
        product.register(at)
        uow.ledger.append(
            EventKind.REGISTERED,
            product.product_id,
            product.manufacturer,
            f"{model.format_timestamp(at)} - REGISTERED - {product.product_id} by {product.manufacturer}",
            at,
        )
        uow.commit()

    logger.info(f"Registered product {product_id} ({command.name}, batch {batch_number})")
    return product_id


def update_status_by_token(command: UpdateStatusByToken, uow: AbstractUnitOfWork) -> str:
    """
    Scan-and-update: the token alone selects the product.

    Raises:
        InvalidStatusError: If new_status is not a lifecycle state
        TokenMismatchError: If the token authenticates no registered product
    """
    status = ProductStatus.parse(command.new_status)
    with uow:
        product = uow.products.find_by_token(command.token)
        if product is None:
            logger.warning(f"Rejected status update by {command.actor}: QR not recognized")
            raise TokenMismatchError("Scanned token does not match any registered product")

        _apply_status_update(product, status, command.actor, uow)
        uow.commit()

    return product.product_id


def submit_scanned_update(command: SubmitScannedUpdate, uow: AbstractUnitOfWork) -> str:
    """
    Update a selected product after checking the scanned token belongs to it.

    Raises:
        InvalidStatusError: If new_status is not a lifecycle state
        NotFoundError: If no product has the given id
        TokenMismatchError: If the token is not the product's token
    """
    status = ProductStatus.parse(command.new_status)
    with uow:
        product = uow.products.get(command.product_id)
        if product is None:
            raise NotFoundError(f"Product {command.product_id} not found")
        if not verify_token(command.token, product.product_id, product.name, product.batch_number):
            logger.warning(f"Rejected status update of {product.product_id} by {command.actor}: QR mismatch")
            raise TokenMismatchError(f"Scanned token does not match product {product.product_id}")

        _apply_status_update(product, status, command.actor, uow)
        uow.commit()

    return product.product_id


def flag_product(command: FlagProduct, uow: AbstractUnitOfWork) -> str:
    """
    Record a counterfeit report. Every report is appended to the ledger,
    even for a product that is already flagged.

    Raises:
        NotFoundError: If no product has the given id
    """
    with uow:
        product = uow.products.get(command.product_id)
        if product is None:
            raise NotFoundError(f"Product {command.product_id} not found")

        at = model.now()
        product.flag(command.actor, at)
        uow.ledger.append(
            EventKind.FLAGGED,
            product.product_id,
            command.actor,
            f"{model.format_timestamp(at)} - FLAGGED - {product.product_id} reported by {command.actor}",
            at,
        )
        uow.commit()

    return product.product_id


def _apply_status_update(product: Product, status: ProductStatus, actor: str, uow: AbstractUnitOfWork):
    at = model.now()
    line = product.apply_status_update(status, actor, uow.rng, at)
    uow.ledger.append(EventKind.for_status(status), product.product_id, actor, line, at)
    logger.info(f"Updated {product.product_id} to {status.value} by {actor}")


def alert_support_on_flag(event: ProductFlagged, uow: AbstractUnitOfWork):
    """Notify support that a customer reported a product; support will review."""
    logger.warning(
        f"Product {event.product_id} reported as counterfeit by {event.actor}. Support will review."
    )


def publish_event(event, uow: AbstractUnitOfWork):
    """
    Publish domain event to Redis for consumption by external services
    (dashboards, alerting). Disabled unless PUBLISH_EVENTS is set.
    """
    if not config.get_event_publishing_enabled():
        return

    try:
        # Import here so Redis is only configured when publishing is enabled
        from provenance.adapters import redis_publisher

        redis_publisher.publish(redis_publisher.channel_for(event), event)

    except Exception as e:
        logger.error(f"Failed to publish {type(event).__name__} for {event.product_id}: {e}")
        # Don't re-raise - external failures shouldn't break the flow
