import abc
import logging
from typing import Dict, List, Optional, Set

from provenance.domain.exceptions import DuplicateIdError
from provenance.domain.identity import verify_token
from provenance.domain.model import Product

logger = logging.getLogger(__name__)


class AbstractRepository(abc.ABC):
    def __init__(self):
        self.seen = set()  # type: Set[Product]

    def add(self, product: Product) -> str:
        self._add(product)
        self.seen.add(product)
        return product.product_id

    def get(self, product_id) -> Optional[Product]:
        product = self._get(product_id)
        if product:
            self.seen.add(product)
        return product

    def list(self) -> List[Product]:
        products = self._list()
        for product in products:
            self.seen.add(product)
        return products

    def find_by_token(self, token: str) -> Optional[Product]:
        """
        Authenticate a scanned token against every registered product.

        Tokens are recomputed from each product on every call rather than read
        from an index, so a forged or stale value never matches.
        """
        for product in self._list():
            if verify_token(token, product.product_id, product.name, product.batch_number):
                self.seen.add(product)
                return product
        return None

    def next_id(self) -> str:
        """Next free id of the form PROD001, PROD002, ..."""
        number = len(self._list()) + 1
        while self._get(f"PROD{number:03d}") is not None:
            number += 1
        return f"PROD{number:03d}"

    @abc.abstractmethod
    def _add(self, product: Product):
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, product_id) -> Optional[Product]:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self) -> List[Product]:
        raise NotImplementedError


class InMemoryRepository(AbstractRepository):
    """
    Registry view over the shared product map.

    New products are staged until commit so a rolled back unit of work leaves
    the registry untouched. Insertion order of the map is registration order.
    """

    def __init__(self, products: Dict[str, Product]):
        super().__init__()
        self._products = products
        self._pending = {}  # type: Dict[str, Product]

    def _add(self, product):
        if product.product_id in self._products or product.product_id in self._pending:
            raise DuplicateIdError(f"Product {product.product_id} is already registered")
        self._pending[product.product_id] = product

    def _get(self, product_id):
        if product_id in self._pending:
            return self._pending[product_id]
        return self._products.get(product_id)

    def _list(self) -> List[Product]:
        return list(self._products.values()) + list(self._pending.values())

    def commit(self):
        if self._pending:
            logger.debug(f"Publishing {len(self._pending)} new products to registry")
        self._products.update(self._pending)
        self._pending.clear()

    def rollback(self):
        self._pending.clear()
