"""Tracker service: the operations front-ends call into."""

import logging
import random
from typing import List, Optional, Tuple, Union

import config
from provenance import views
from provenance.domain.commands import (
    FlagProduct,
    RegisterProduct,
    SubmitScannedUpdate,
    UpdateStatusByToken,
)
from provenance.domain.exceptions import NotFoundError
from provenance.domain.model import LedgerEntry, ProductSnapshot, ProductStatus
from provenance.service_layer import messagebus, seed
from provenance.service_layer.unit_of_work import InMemoryUnitOfWork, TrackerStore

logger = logging.getLogger(__name__)


class SupplyChainTracker:
    """
    Product registry, lifecycle and ledger behind a single object.

    Mutating calls are dispatched as commands through the message bus; reads
    go through views. All calls share one TrackerStore, so the tracker can be
    used from several threads at once. Products are handed out as frozen
    ProductSnapshot copies; the live records never leave the store.

    Args:
        store: Shared registry and ledger (a fresh one by default)
        rng: Random source for location jitter and batch numbers
    """

    def __init__(self, store: TrackerStore = None, rng: random.Random = None):
        self.store = store or TrackerStore()
        self.rng = rng or random.Random(config.get_random_seed())

    def _uow(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(store=self.store, rng=self.rng)

    def _dispatch(self, command) -> str:
        results = messagebus.handle(command, self._uow())
        return results[0]

    def _require(self, product_id: str) -> ProductSnapshot:
        product = self.get(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def register(
        self,
        name: str,
        manufacturer: str,
        distributor: str,
        retailer: str,
        assigned_actor: str,
        latitude: float,
        longitude: float,
        product_id: Optional[str] = None,
        batch_number: Optional[str] = None,
    ) -> ProductSnapshot:
        product_id = self._dispatch(
            RegisterProduct(
                name=name,
                manufacturer=manufacturer,
                distributor=distributor,
                retailer=retailer,
                assigned_actor=assigned_actor,
                latitude=latitude,
                longitude=longitude,
                product_id=product_id,
                batch_number=batch_number,
            )
        )
        return self._require(product_id)

    def seed_sample_products(self) -> List[str]:
        return seed.seed_sample_products(self._uow())

    def get(self, product_id: str) -> Optional[ProductSnapshot]:
        return views.get_product(product_id, self._uow())

    def list_products(self) -> List[ProductSnapshot]:
        return views.list_products(self._uow())

    def lookup_by_token(self, token: str) -> Optional[ProductSnapshot]:
        return views.lookup_by_token(token, self._uow())

    def qr_string(self, product_id: str) -> str:
        return self._require(product_id).qr_string()

    def update_status(self, token: str, new_status: Union[str, ProductStatus], actor: str) -> ProductSnapshot:
        """Scan-and-update; raises TokenMismatchError for an unrecognized token."""
        product_id = self._dispatch(
            UpdateStatusByToken(token=token, new_status=new_status, actor=actor)
        )
        return self._require(product_id)

    def submit_scanned_update(
        self,
        product_id: str,
        token: str,
        new_status: Union[str, ProductStatus],
        actor: str,
    ) -> ProductSnapshot:
        """Update a chosen product; the scanned token must be that product's token."""
        self._dispatch(
            SubmitScannedUpdate(product_id=product_id, token=token, new_status=new_status, actor=actor)
        )
        return self._require(product_id)

    def flag(self, product_id: str, actor: str) -> ProductSnapshot:
        self._dispatch(FlagProduct(product_id=product_id, actor=actor))
        return self._require(product_id)

    def render_provenance(self, product_id: str) -> str:
        return views.provenance_for(product_id, self._uow())

    def list_assigned(self, actor: str) -> List[ProductSnapshot]:
        return views.list_assigned(actor, self._uow())

    def ledger_snapshot(self) -> Tuple[LedgerEntry, ...]:
        return views.ledger_snapshot(self._uow())
