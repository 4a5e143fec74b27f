"""Demo products registered when the tracker starts."""

import logging
from typing import List

from provenance.domain.commands import RegisterProduct
from provenance.service_layer import messagebus
from provenance.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    dict(product_id="PROD001", name="Vitamin C Supplement", manufacturer="ABC Pharma",
         distributor="XY2 Distributors", retailer="Retailer One", assigned_actor="DeliveryGuy1",
         latitude=12.9716, longitude=77.5946),
    dict(product_id="PROD002", name="Organic Green Tea", manufacturer="GreenLeaf Co",
         distributor="DistX", retailer="HealthyStore", assigned_actor="DeliveryGuy1",
         latitude=12.9710, longitude=77.5950),
    dict(product_id="PROD003", name="Fitness Band", manufacturer="FitLLC",
         distributor="LogiCorp", retailer="SportMart", assigned_actor="DeliveryGuy2",
         latitude=12.9720, longitude=77.5936),
]


def seed_sample_products(uow: AbstractUnitOfWork) -> List[str]:
    """
    Register the sample products that are not registered yet.

    Returns:
        Ids of the products registered by this call
    """
    seeded = []
    for sample in SAMPLE_PRODUCTS:
        with uow:
            exists = uow.products.get(sample["product_id"]) is not None
        if exists:
            continue
        seeded.extend(messagebus.handle(RegisterProduct(**sample), uow))

    logger.info(f"Seeded {len(seeded)} sample products")
    return seeded
