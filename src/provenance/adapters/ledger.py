"""Append-only event ledger."""

import abc
import logging
from datetime import datetime
from typing import List, Tuple

from provenance.domain.model import EventKind, LedgerEntry

logger = logging.getLogger(__name__)


class AbstractLedger(abc.ABC):
    """Totally ordered log of lifecycle events; entries are never changed or removed."""

    def append(
        self,
        event_kind: EventKind,
        product_id: str,
        actor: str,
        description: str,
        timestamp: datetime,
    ) -> LedgerEntry:
        entry = self._append(event_kind, product_id, actor, description, timestamp)
        logger.info(f"Ledger #{entry.sequence}: {entry.description}")
        return entry

    def entries(self) -> Tuple[LedgerEntry, ...]:
        return self._entries()

    @abc.abstractmethod
    def _append(self, event_kind, product_id, actor, description, timestamp) -> LedgerEntry:
        raise NotImplementedError

    @abc.abstractmethod
    def _entries(self) -> Tuple[LedgerEntry, ...]:
        raise NotImplementedError


class InMemoryLedger(AbstractLedger):
    """
    Ledger view over the shared entry list.

    Sequence numbers continue from the committed entries; appends stay pending
    until commit. Callers must hold the store lock, which the unit of work does.
    """

    def __init__(self, entries: List[LedgerEntry]):
        self._committed = entries
        self._pending = []  # type: List[LedgerEntry]

    def _append(self, event_kind, product_id, actor, description, timestamp) -> LedgerEntry:
        entry = LedgerEntry(
            sequence=len(self._committed) + len(self._pending) + 1,
            timestamp=timestamp,
            event_kind=EventKind(event_kind),
            product_id=product_id,
            actor=actor,
            description=description,
        )
        self._pending.append(entry)
        return entry

    def _entries(self) -> Tuple[LedgerEntry, ...]:
        return tuple(self._committed)

    def commit(self):
        self._committed.extend(self._pending)
        self._pending.clear()

    def rollback(self):
        self._pending.clear()
