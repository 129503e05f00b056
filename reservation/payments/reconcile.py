"""
Réconciliation du statut d'une commande après retour de la passerelle.
Utilisée quand le message PAYMENT_RESULT n'arrive jamais (popup fermé, opener perdu):
on interroge le statut serveur à intervalle régulier.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional
import asyncio
import logging

import httpx

from reservation.config import PAYMENT_STATUS_MAX_POLLS, PAYMENT_STATUS_POLL_SECONDS

logger = logging.getLogger(__name__)

PAID_STATUSES = frozenset({"PAID"})
FAILED_STATUSES = frozenset({"PAYMENT_FAILED", "PAYMENT_TIMEOUT", "CANCELED_UNPAID"})

StatusFetcher = Callable[[str], Awaitable[Optional[str]]]


class ReconcileOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"


@dataclass(frozen=True)
class ReconcileResult:
    outcome: ReconcileOutcome
    status: Optional[str]
    polls: int


def classify_status(status: Optional[str]) -> Optional[ReconcileOutcome]:
    value = (status or "").upper()
    if value in PAID_STATUSES:
        return ReconcileOutcome.SUCCESS
    if value in FAILED_STATUSES:
        return ReconcileOutcome.FAILURE
    return None


async def reconcile_payment_status(
    order_no: str,
    fetch_status: StatusFetcher,
    *,
    interval: float = PAYMENT_STATUS_POLL_SECONDS,
    max_polls: int = PAYMENT_STATUS_MAX_POLLS,
) -> ReconcileResult:
    """
    - PAID -> SUCCESS ; PAYMENT_FAILED / PAYMENT_TIMEOUT / CANCELED_UNPAID -> FAILURE
    - erreur de lecture: nouvel essai au tour suivant
    - max_polls atteint: PENDING (FAILURE si le dernier essai a échoué)
    """
    status: Optional[str] = None
    for poll in range(1, max(1, max_polls) + 1):
        try:
            status = await fetch_status(order_no)
        except Exception:
            logger.exception("payments.reconcile fetch failed order=%s poll=%s", order_no, poll)
            if poll >= max_polls:
                return ReconcileResult(ReconcileOutcome.FAILURE, status, poll)
        else:
            outcome = classify_status(status)
            if outcome is not None:
                logger.info("payments.reconcile order=%s status=%s polls=%s", order_no, status, poll)
                return ReconcileResult(outcome, status, poll)
            if poll >= max_polls:
                break
        await asyncio.sleep(interval)
    logger.info("payments.reconcile pending order=%s status=%s", order_no, status)
    return ReconcileResult(ReconcileOutcome.PENDING, status, max(1, max_polls))


def http_status_fetcher(client: httpx.AsyncClient, base_url: str = "") -> StatusFetcher:
    """Lit GET /api/v1/payments/{order_no}/status via httpx."""
    root = base_url.rstrip("/")

    async def _fetch(order_no: str) -> Optional[str]:
        resp = await client.get(f"{root}/api/v1/payments/{order_no}/status")
        resp.raise_for_status()
        return (resp.json() or {}).get("status")

    return _fetch
