# pylint: disable=attribute-defined-outside-init
from __future__ import annotations
import abc
import logging
import random
import threading
from typing import Dict, List

import config
from provenance.adapters import ledger, repository
from provenance.domain.model import LedgerEntry, Product
from provenance.domain.events import Event

logger = logging.getLogger(__name__)


class TrackerStore:
    """Process-wide product registry and ledger shared by every unit of work."""

    def __init__(self):
        self.products = {}  # type: Dict[str, Product]
        self.ledger = []  # type: List[LedgerEntry]
        self.lock = threading.RLock()


class AbstractUnitOfWork(abc.ABC):
    """Atomic scope over the registry and ledger; leaving without commit rolls back."""
    products: repository.AbstractRepository
    ledger: ledger.AbstractLedger
    rng: random.Random
    new_events: List[Event]

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args):
        self.rollback()

    def commit(self):
        """Publish staged changes and take the events they raised; runs under the lock."""
        self._commit()
        for product in self.products.seen:
            self.new_events.extend(product.events)
            product.events.clear()

    def collect_new_events(self) -> List[Event]:
        """Events raised by committed work since the last call, in raise order."""
        new_events, self.new_events = self.new_events, []
        return new_events

    @abc.abstractmethod
    def _commit(self):
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self):
        raise NotImplementedError


DEFAULT_STORE = TrackerStore()


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Critical section over a TrackerStore.

    Entering takes the store lock and exiting releases it, so a product
    mutation and its ledger append are never interleaved with another caller.
    Registry adds and ledger appends become visible only on commit.
    """

    def __init__(self, store: TrackerStore = None, rng: random.Random = None):
        self.store = store or DEFAULT_STORE
        self.rng = rng or random.Random(config.get_random_seed())
        self.new_events = []

    def __enter__(self):
        self.store.lock.acquire()
        self.products = repository.InMemoryRepository(self.store.products)
        self.ledger = ledger.InMemoryLedger(self.store.ledger)
        return super().__enter__()

    def __exit__(self, *args):
        try:
            super().__exit__(*args)
        finally:
            self.store.lock.release()

    def _commit(self):
        self.products.commit()
        self.ledger.commit()

    def rollback(self):
        self.products.rollback()
        self.ledger.rollback()
