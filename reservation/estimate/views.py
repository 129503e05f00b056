# module reservation.estimate.views

"""Endpoints du devis (assistant + panier) rattachés à la session navigateur.
- GET  /api/v1/estimate: état courant (étape, services, dates, lignes, total).
- POST /services/toggle, /dates, PUT /step: pilotage de l'assistant.
- POST/PATCH/DELETE /items: opérations du panier (dates requises pour l'ajout).
Aucune authentification: l'identité invité est portée par la session (cookie signé).
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from reservation.estimate import service as estimate_service
from reservation.estimate.store import Estimate, get_estimate, peek_estimate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/estimate", tags=["Estimate API"])

class ToggleServiceRequest(BaseModel):
    service: str

class DatesRequest(BaseModel):
    check_in: Optional[str] = None
    check_out: Optional[str] = None

class StepRequest(BaseModel):
    step: int

class AddItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1)

class QuantityRequest(BaseModel):
    quantity: int

@router.get("")
def get_estimate_state(estimate: Estimate = Depends(peek_estimate)):
    """Etat complet du devis; le total est recalculé à chaque lecture."""
    return estimate_service.describe(estimate)

@router.post("/services/toggle")
def toggle_service(req: ToggleServiceRequest, estimate: Estimate = Depends(get_estimate)):
    """Ajoute/retire 'room' ou 'seminar' de la sélection (400 si service inconnu)."""
    return estimate_service.toggle_service(estimate, req.service)

@router.post("/dates")
def apply_dates(req: DatesRequest, estimate: Estimate = Depends(get_estimate)):
    """Applique la plage de dates.
    - Deux dates présentes: avance d'une étape (applied=true).
    - Sélection partielle: mémorisée, étape inchangée (applied=false).
    - Départ avant arrivée ou format invalide: 400.
    """
    return estimate_service.apply_dates(estimate, req.check_in, req.check_out)

@router.put("/step")
def set_step(req: StepRequest, estimate: Estimate = Depends(get_estimate)):
    return estimate_service.set_step(estimate, req.step)

@router.post("/items")
def add_item(req: AddItemRequest, estimate: Estimate = Depends(get_estimate)):
    """Ajoute un produit du catalogue avec la plage de dates de l'assistant.
    - 404 si produit inconnu, 400 si aucune plage de dates n'est sélectionnée.
    """
    return estimate_service.add_item(estimate, req.product_id, req.quantity)

@router.patch("/items/{line_id}")
def update_item_quantity(line_id: str, req: QuantityRequest, estimate: Estimate = Depends(get_estimate)):
    """Met à jour la quantité (ramenée à 1 minimum); 404 si la ligne n'existe pas."""
    return estimate_service.update_quantity(estimate, line_id, req.quantity)

@router.delete("/items/{line_id}")
def remove_item(line_id: str, estimate: Estimate = Depends(get_estimate)):
    """Retire une ligne; idempotent (removed=false si la ligne n'existe pas)."""
    return estimate_service.remove_item(estimate, line_id)
