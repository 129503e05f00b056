"""
Stockage en mémoire des devis en cours (un assistant + un panier par session navigateur).
La clé est un identifiant aléatoire posé dans la session Starlette (cookie signé).
Le stock est borné: expiration après ESTIMATE_TTL_SECONDS d'inactivité et
au plus ESTIMATE_MAX_ENTRIES devis (le moins récemment utilisé sort en premier).
"""
from collections import OrderedDict
from typing import Callable, Optional
from uuid import uuid4
import logging
import time

from fastapi import Request

from reservation.config import ESTIMATE_MAX_ENTRIES, ESTIMATE_TTL_SECONDS
from reservation.estimate.cart import Cart
from reservation.estimate.wizard import BookingWizard

logger = logging.getLogger(__name__)

SESSION_KEY = "estimate_id"


class Estimate:
    """Devis d'un invité: état de l'assistant, panier et dernière commande émise."""

    def __init__(self, estimate_id: str, catalog=None):
        self.id = estimate_id
        self.wizard = BookingWizard()
        self.cart = Cart(catalog=catalog)
        self.order_no: Optional[str] = None


class EstimateStore:
    def __init__(self, ttl_seconds: int = ESTIMATE_TTL_SECONDS, max_entries: int = ESTIMATE_MAX_ENTRIES,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # id -> (devis, dernier accès); ordre = du moins au plus récemment utilisé
        self._items: "OrderedDict[str, tuple]" = OrderedDict()

    def _prune(self, now: float) -> None:
        if self.ttl_seconds and self.ttl_seconds > 0:
            cutoff = now - self.ttl_seconds
            while self._items:
                oldest_id, (_, seen) = next(iter(self._items.items()))
                if seen > cutoff:
                    break
                self._items.popitem(last=False)
                logger.debug("estimate.store expired id=%s", oldest_id)

    def _touch(self, estimate: Estimate, now: float) -> None:
        self._items[estimate.id] = (estimate, now)
        self._items.move_to_end(estimate.id)
        if self.max_entries and self.max_entries > 0:
            while len(self._items) > self.max_entries:
                evicted_id, _ = self._items.popitem(last=False)
                logger.info("estimate.store evicted id=%s", evicted_id)

    def get(self, estimate_id: Optional[str]) -> Optional[Estimate]:
        now = self._clock()
        self._prune(now)
        entry = self._items.get(estimate_id) if estimate_id else None
        if entry is None:
            return None
        self._touch(entry[0], now)
        return entry[0]

    def get_or_create(self, estimate_id: Optional[str] = None) -> Estimate:
        estimate = self.get(estimate_id)
        if estimate is not None:
            return estimate
        estimate = Estimate(estimate_id or uuid4().hex)
        self._touch(estimate, self._clock())
        logger.debug("estimate.store created id=%s", estimate.id)
        return estimate

    def discard(self, estimate_id: str) -> None:
        self._items.pop(estimate_id, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


store = EstimateStore()


def get_estimate(request: Request) -> Estimate:
    """Dépendance FastAPI: devis rattaché à la session courante (créé au besoin)."""
    estimate = store.get_or_create(request.session.get(SESSION_KEY))
    request.session[SESSION_KEY] = estimate.id
    return estimate


def peek_estimate(request: Request) -> Estimate:
    """Dépendance FastAPI des lectures: devis existant, sinon un devis vide non conservé."""
    estimate_id = request.session.get(SESSION_KEY)
    return store.get(estimate_id) or Estimate(estimate_id or uuid4().hex)
