"""
Cas d'usage 'estimate': orchestre assistant, panier et catalogue pour les vues.
Les erreurs de validation sont traduites en HTTPException(400/404) sans muter l'état.
"""
from datetime import date
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException

from reservation.catalog.repository import get_catalog
from reservation.estimate.store import Estimate

logger = logging.getLogger(__name__)

# module reservation.estimate.service
def parse_date(value: Any) -> Optional[date]:
    """
    Parse une date ISO (YYYY-MM-DD).
    - None / "" => None (sélection incomplète, pas une erreur).
    - Format invalide => HTTPException(400).
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Date invalide: {value}")

def describe(estimate: Estimate) -> Dict[str, Any]:
    """Etat complet renvoyé au front: assistant, lignes avec montant, total recalculé."""
    snapshot = estimate.cart.snapshot()
    return {
        "id": estimate.id,
        "wizard": estimate.wizard.to_dict(),
        "items": snapshot["items"],
        "totalAmount": estimate.cart.total_amount,
        "orderNo": estimate.order_no,
    }

def toggle_service(estimate: Estimate, service: str) -> Dict[str, Any]:
    try:
        estimate.wizard.toggle_service((service or "").strip().lower())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return describe(estimate)

def apply_dates(estimate: Estimate, check_in: Any, check_out: Any) -> Dict[str, Any]:
    ci = parse_date(check_in)
    co = parse_date(check_out)
    if ci and co and co < ci:
        raise HTTPException(status_code=400, detail="La date de départ précède la date d'arrivée")
    applied = estimate.wizard.apply_dates(ci, co)
    if not applied:
        # Sélection partielle: mémorisée pour l'affichage, l'étape ne change pas
        estimate.wizard.set_dates(ci, co)
    result = describe(estimate)
    result["applied"] = applied
    return result

def set_step(estimate: Estimate, step: Any) -> Dict[str, Any]:
    try:
        estimate.wizard.set_step(int(step))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Etape invalide")
    return describe(estimate)

def add_item(estimate: Estimate, product_id: str, quantity: Any = 1) -> Dict[str, Any]:
    product = get_catalog().find(str(product_id or "").strip())
    if not product:
        raise HTTPException(status_code=404, detail="Produit introuvable")
    try:
        qty = int(quantity if quantity is not None else 1)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Quantité invalide")
    line = estimate.cart.add_line(product, qty, wizard=estimate.wizard)
    if line is None:
        raise HTTPException(status_code=400, detail="Veuillez d'abord sélectionner les dates")
    logger.info("estimate.add_item estimate=%s product=%s line=%s", estimate.id, product.id, line.id)
    result = describe(estimate)
    result["lineId"] = line.id
    return result

def update_quantity(estimate: Estimate, line_id: str, quantity: Any) -> Dict[str, Any]:
    try:
        qty = int(quantity)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Quantité invalide")
    if estimate.cart.set_quantity(line_id, qty) is None:
        raise HTTPException(status_code=404, detail="Ligne introuvable")
    return describe(estimate)

def remove_item(estimate: Estimate, line_id: str) -> Dict[str, Any]:
    removed = estimate.cart.remove_line(line_id)
    result = describe(estimate)
    result["removed"] = removed
    return result
