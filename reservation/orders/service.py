"""
Création des commandes de réservation et préparation du payload de paiement KISPG.
- create_order: valide le panier, calcule ediDate + requestHash, persiste la commande (PENDING)
- get_order_status / mark_order_status: lecture et mise à jour du statut
- record_gateway_return: trace le retour navigateur (RETURNED, jamais PAID)
- confirm_payment: verdict de confiance (vérification serveur) -> PAID ou PAYMENT_FAILED
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import hashlib
import itertools
import logging
import time

from fastapi import HTTPException

from reservation.config import BASE_URL, KISPG_MERCHANT_KEY, KISPG_MID, KISPG_RETURN_PATH
from reservation.orders import repository as orders_repository
from reservation.payments.session import PaymentInit

logger = logging.getLogger(__name__)

STATUS_PENDING = "PENDING"
STATUS_RETURNED = "RETURNED"
STATUS_PAID = "PAID"
STATUS_FAILED = "PAYMENT_FAILED"
STATUS_TIMEOUT = "PAYMENT_TIMEOUT"
STATUS_CANCELED = "CANCELED_UNPAID"
ORDER_STATUSES = (STATUS_PENDING, STATUS_RETURNED, STATUS_PAID, STATUS_FAILED, STATUS_TIMEOUT, STATUS_CANCELED)

KST = timezone(timedelta(hours=9))

_sequence = itertools.count(1)


def make_order_no(now_ms: Optional[int] = None) -> str:
    """'resv_<n>_<timestamp ms>' (n: compteur du processus)."""
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"resv_{next(_sequence)}_{ms}"


def make_edi_date(now: Optional[datetime] = None) -> str:
    """Horodatage KISPG YYYYMMDDHHMMSS, heure de Séoul."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(KST).strftime("%Y%m%d%H%M%S")


def compute_request_hash(mid: str, edi_date: str, amount: str, merchant_key: str) -> str:
    return hashlib.sha256(f"{mid}{edi_date}{amount}{merchant_key}".encode("utf-8")).hexdigest()


def make_item_name(items) -> str:
    names = [str(i.get("name") or "") for i in items if i.get("name")]
    if not names:
        return "Reservation"
    if len(names) == 1:
        return names[0]
    return f"{names[0]} +{len(names) - 1}"


def return_url() -> str:
    return f"{BASE_URL}{KISPG_RETURN_PATH}"


def create_order(snapshot: Dict[str, Any], buyer: Dict[str, str], *, user_ip: Optional[str] = None,
                 estimate_id: Optional[str] = None, now: Optional[datetime] = None) -> PaymentInit:
    """
    snapshot: Cart.snapshot() -> {"items": [...], "totalAmount": int}
    buyer: {"name", "tel", "email"}
    """
    items = list(snapshot.get("items") or [])
    if not items:
        raise HTTPException(status_code=400, detail="Panier vide")
    total = int(snapshot.get("totalAmount") or 0)
    if total <= 0:
        raise HTTPException(status_code=400, detail="Montant de la commande invalide")

    order_no = make_order_no()
    edi_date = make_edi_date(now)
    amount = str(total)
    init = PaymentInit(
        mid=KISPG_MID,
        moid=order_no,
        amt=amount,
        item_name=make_item_name(items),
        buyer_name=buyer.get("name") or "",
        buyer_tel=buyer.get("tel") or "",
        buyer_email=buyer.get("email") or "",
        request_hash=compute_request_hash(KISPG_MID, edi_date, amount, KISPG_MERCHANT_KEY),
        edi_date=edi_date,
        return_url=return_url(),
        user_ip=user_ip,
        mbs_reserved1=order_no,
    )
    row = {
        "order_no": order_no,
        "estimate_id": estimate_id,
        "status": STATUS_PENDING,
        "amount": total,
        "item_name": init.item_name,
        "buyer_name": init.buyer_name,
        "buyer_email": init.buyer_email,
        "buyer_tel": init.buyer_tel,
        "items": items,
        "payment_init": init.to_dict(),
    }
    if orders_repository.insert_order(row) is None:
        raise HTTPException(status_code=502, detail="Impossible d'enregistrer la commande")
    logger.info("orders.create order_no=%s amount=%s items=%s", order_no, total, len(items))
    return init


def get_order(order_no: str) -> dict:
    row = orders_repository.get_order(order_no)
    if not row:
        raise HTTPException(status_code=404, detail="Commande introuvable")
    return row


def get_payment_init(order_no: str) -> PaymentInit:
    return PaymentInit.from_dict(get_order(order_no).get("payment_init") or {})


def get_order_status(order_no: str) -> Optional[str]:
    row = orders_repository.get_order(order_no)
    return (row or {}).get("status")


def mark_order_status(order_no: str, status: str, *, tid: Optional[str] = None,
                      result_msg: Optional[str] = None) -> bool:
    if status not in ORDER_STATUSES:
        raise ValueError(f"statut inconnu: {status}")
    values: Dict[str, Any] = {"status": status}
    if tid:
        values["tid"] = tid
    if result_msg:
        values["result_msg"] = result_msg
    ok = orders_repository.update_order(order_no, values)
    logger.info("orders.mark_status order_no=%s status=%s ok=%s", order_no, status, ok)
    return ok


def _amount_matches(row: dict, amount: Any) -> bool:
    try:
        return int(str(amount).strip()) == int(row.get("amount") or 0)
    except (TypeError, ValueError):
        return False


def record_gateway_return(order_no: str, *, result_cd: str, amount: Any,
                          tid: Optional[str] = None, result_msg: Optional[str] = None) -> bool:
    """
    Trace le retour navigateur de KISPG. Les paramètres ne sont pas signés:
    seule une commande PENDING au montant identique passe à RETURNED.
    Aucun statut terminal n'est écrit ici.
    """
    row = orders_repository.get_order(order_no)
    if not row:
        logger.warning("orders.gateway_return unknown order_no=%s", order_no)
        return False
    if not _amount_matches(row, amount):
        logger.warning("orders.gateway_return amount mismatch order_no=%s expected=%s got=%s",
                       order_no, row.get("amount"), amount)
        return False
    if row.get("status") != STATUS_PENDING:
        logger.info("orders.gateway_return ignored order_no=%s status=%s", order_no, row.get("status"))
        return False
    values: Dict[str, Any] = {"status": STATUS_RETURNED, "result_cd": result_cd or None}
    if tid:
        values["tid"] = tid
    if result_msg:
        values["result_msg"] = result_msg
    ok = orders_repository.update_order(order_no, values)
    logger.info("orders.gateway_return order_no=%s resultCd=%s ok=%s", order_no, result_cd, ok)
    return ok


def confirm_payment(order_no: str, *, paid: bool, amount: Any = None, tid: Optional[str] = None,
                    result_msg: Optional[str] = None) -> str:
    """Verdict vérifié côté serveur (notification ou requête KISPG authentifiée)."""
    row = get_order(order_no)
    if row.get("status") in (STATUS_PAID, STATUS_FAILED, STATUS_TIMEOUT, STATUS_CANCELED):
        return row["status"]
    if paid and amount is not None and not _amount_matches(row, amount):
        logger.warning("orders.confirm amount mismatch order_no=%s expected=%s got=%s",
                       order_no, row.get("amount"), amount)
        paid = False
        result_msg = result_msg or "Montant incohérent"
    status = STATUS_PAID if paid else STATUS_FAILED
    if not mark_order_status(order_no, status, tid=tid, result_msg=result_msg):
        raise HTTPException(status_code=502, detail="Impossible de mettre à jour la commande")
    return status
