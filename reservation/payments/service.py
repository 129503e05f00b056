"""
Orchestration paiement côté serveur:
- init_payment: commande à partir du panier du devis, payload PaymentInit + formulaire KISPG
- handle_gateway_return: interprète le retour KISPG (non signé) et le trace sur la commande
- order_status: statut exposé au client (réconciliation)
"""
from typing import Any, Dict, Mapping, Optional
import logging

from reservation.config import API_ORIGIN, BASE_URL, KISPG_URL
from reservation.estimate.store import Estimate
from reservation.estimate.store import store as estimate_store
from reservation.orders import service as orders_service
from reservation.payments.channel import PAYMENT_RESULT_TYPE
from reservation.payments.gateway import build_form_fields

logger = logging.getLogger(__name__)

SUCCESS_RESULT_CODES = ("0000", "3001")


# module reservation.payments.service
def init_payment(estimate: Estimate, buyer: Dict[str, str], *, user_ip: Optional[str] = None) -> Dict[str, Any]:
    snapshot = estimate.cart.snapshot()
    init = orders_service.create_order(snapshot, buyer, user_ip=user_ip, estimate_id=estimate.id)
    estimate.order_no = init.moid
    return {
        "orderNo": init.moid,
        "paymentInit": init.to_dict(),
        "launchUrl": f"/payment/launch/{init.moid}",
        "gateway": {"url": KISPG_URL, "fields": dict(build_form_fields(init))},
        "allowedOrigins": [o for o in (BASE_URL, API_ORIGIN) if o],
    }


def _first(params: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = params.get(key)
        if value:
            return str(value)
    return ""


def handle_gateway_return(params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Paramètres KISPG: resultCd|resultCode, resultMsg, ordNo|moid, tid, amt.
    Retourne le contexte de la page de retour (message PAYMENT_RESULT inclus).
    Le retour navigateur ne règle jamais la commande: il passe au mieux en RETURNED,
    le statut PAID vient de orders_service.confirm_payment.
    """
    result_cd = _first(params, "resultCd", "resultCode")
    result_msg = _first(params, "resultMsg")
    order_no = _first(params, "ordNo", "moid")
    tid = _first(params, "tid")
    amount = _first(params, "amt", "goodsAmt")
    accepted = False
    if order_no:
        accepted = orders_service.record_gateway_return(order_no, result_cd=result_cd, amount=amount,
                                                        tid=tid or None, result_msg=result_msg or None)
    else:
        logger.warning("payments.return without order number resultCd=%s", result_cd)
    success = accepted and result_cd in SUCCESS_RESULT_CODES

    logger.info("payments.return order_no=%s resultCd=%s success=%s", order_no, result_cd, success)
    return {
        "success": success,
        "order_no": order_no,
        "result_msg": result_msg,
        "target_origin": BASE_URL,
        "message": {
            "type": PAYMENT_RESULT_TYPE,
            "orderId": order_no,
            "success": success,
            "data": {"resultCd": result_cd, "resultMsg": result_msg, "tid": tid, "amt": amount},
        },
    }


def order_status(order_no: str, estimate: Optional[Estimate] = None) -> Dict[str, Any]:
    status = orders_service.get_order(order_no).get("status")
    if status == orders_service.STATUS_PAID and estimate is not None and estimate.order_no == order_no:
        # commande réglée: le devis repart à vide
        estimate.cart.clear()
        estimate_store.discard(estimate.id)
    return {"orderNo": order_no, "status": status}
