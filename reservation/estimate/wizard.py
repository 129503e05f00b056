"""
Assistant de réservation (stepper): 1 services -> 2 dates -> 3 articles -> 4 récapitulatif.
Machine permissive: set_step() permet aux appelants (bouton retour/suivant) de changer
d'étape sans revalider les étapes déjà franchies.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
import logging

from reservation.catalog.models import SERVICES

logger = logging.getLogger(__name__)

STEP_SERVICES = 1
STEP_DATES = 2
STEP_ITEMS = 3
STEP_REVIEW = 4

STEP_NAMES = {
    STEP_SERVICES: "service_selection",
    STEP_DATES: "date_selection",
    STEP_ITEMS: "item_selection",
    STEP_REVIEW: "review",
}


class BookingWizard:
    def __init__(self) -> None:
        self.step: int = STEP_SERVICES
        self.selected_services: List[str] = []
        self.check_in: Optional[date] = None
        self.check_out: Optional[date] = None

    def toggle_service(self, service: str) -> List[str]:
        """Ajoute ou retire un service; possible à n'importe quelle étape, l'étape ne change pas."""
        if service not in SERVICES:
            raise ValueError(f"Service inconnu: {service}")
        if service in self.selected_services:
            self.selected_services = [s for s in self.selected_services if s != service]
        else:
            self.selected_services = self.selected_services + [service]
        return list(self.selected_services)

    def set_dates(self, check_in: Optional[date], check_out: Optional[date]) -> None:
        """Mémorise la sélection en cours (l'une ou l'autre date peut être vide), sans avancer."""
        self.check_in = check_in
        self.check_out = check_out

    def apply_dates(self, check_in: Optional[date], check_out: Optional[date]) -> bool:
        """
        Valide la plage de dates et avance d'exactement une étape.
        - Sans effet (False) si l'une des dates est absente ou si check_out < check_in.
        """
        if check_in is None or check_out is None:
            return False
        if check_out < check_in:
            logger.warning("estimate.wizard invalid range check_in=%s check_out=%s", check_in, check_out)
            return False
        self.check_in = check_in
        self.check_out = check_out
        self.step += 1
        return True

    @property
    def is_date_selection_valid(self) -> bool:
        return self.check_in is not None and self.check_out is not None

    @property
    def date_range(self) -> Optional[Tuple[date, date]]:
        """Plage exploitable par le panier; None si incomplète ou inversée (départ avant arrivée)."""
        if not self.is_date_selection_valid or self.check_out < self.check_in:
            return None
        return self.check_in, self.check_out

    def set_step(self, step: int) -> int:
        self.step = max(STEP_SERVICES, int(step))
        return self.step

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "stepName": STEP_NAMES.get(self.step),
            "selectedServices": list(self.selected_services),
            "checkIn": self.check_in.isoformat() if self.check_in else None,
            "checkOut": self.check_out.isoformat() if self.check_out else None,
            "isDateSelectionValid": self.is_date_selection_valid,
        }
