"""
Accès aux données pour la feature 'orders' (table Supabase 'reservation_orders').
Sans Supabase configuré, les commandes sont conservées en mémoire (développement local).
"""
from typing import Any, Dict, Optional
import logging

import reservation.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

TABLE = "reservation_orders"

_memory_orders: Dict[str, Dict[str, Any]] = {}


# module reservation.orders.repository
def insert_order(row: Dict[str, Any]) -> Optional[dict]:
    """
    Insère une commande (service-role). Retourne la ligne créée, None en cas d'erreur.
    """
    if not supabase_client.is_configured():
        _memory_orders[row["order_no"]] = dict(row)
        logger.warning("orders.repository.insert_order memory order_no=%s", row["order_no"])
        return dict(row)
    try:
        res = supabase_client.get_service_supabase().table(TABLE).insert(row).execute()
        rows = res.data or []
        return rows[0] if isinstance(rows, list) and rows else dict(row)
    except Exception:
        logger.exception("orders.repository.insert_order failed order_no=%s", row.get("order_no"))
        return None


def get_order(order_no: str) -> Optional[dict]:
    if not order_no:
        return None
    if not supabase_client.is_configured():
        row = _memory_orders.get(order_no)
        return dict(row) if row else None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(TABLE)
            .select("*")
            .eq("order_no", order_no)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("orders.repository.get_order failed order_no=%s", order_no)
        return None


def update_order(order_no: str, values: Dict[str, Any]) -> bool:
    if not supabase_client.is_configured():
        if order_no not in _memory_orders:
            return False
        _memory_orders[order_no].update(values)
        return True
    try:
        res = supabase_client.get_service_supabase().table(TABLE).update(values).eq("order_no", order_no).execute()
        return bool(res.data)
    except Exception:
        logger.exception("orders.repository.update_order failed order_no=%s", order_no)
        return False


def clear_memory_orders() -> None:
    _memory_orders.clear()
