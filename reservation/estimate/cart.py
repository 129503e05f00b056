"""
Panier de réservation (lignes ordonnées, pas de réseau).
- add_line exige une plage de dates sélectionnée dans l'assistant.
- total_amount est recalculé à chaque lecture via le moteur de prix.
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging
import time

from reservation.catalog.models import Product
from reservation.estimate import pricing

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    id: str
    product_id: str
    name: str
    type: str
    check_in: date
    check_out: date
    quantity: int = 1

    @property
    def nights(self) -> int:
        return pricing.nights_between(self.check_in, self.check_out)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "name": self.name,
            "type": self.type,
            "checkIn": self.check_in.isoformat(),
            "checkOut": self.check_out.isoformat(),
            "quantity": self.quantity,
            "nights": self.nights,
            "days": self.nights + 1,
        }


class Cart:
    def __init__(self, catalog=None, clock: Callable[[], float] = time.time):
        self._catalog = catalog
        self._clock = clock
        self._lines: List[CartLine] = []

    @property
    def catalog(self):
        if self._catalog is None:
            from reservation.catalog.repository import get_catalog
            self._catalog = get_catalog()
        return self._catalog

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def _new_line_id(self, product_id: str) -> str:
        base = f"{product_id}-{int(self._clock() * 1000)}"
        taken = {line.id for line in self._lines}
        line_id = base
        n = 1
        while line_id in taken:
            line_id = f"{base}-{n}"
            n += 1
        return line_id

    def add_line(self, product: Product, quantity: int = 1, *, wizard) -> Optional[CartLine]:
        """
        Ajoute une ligne datée avec la plage de l'assistant.
        - Sans plage sélectionnée: aucune mutation, retourne None.
        - La quantité est ramenée à 1 minimum.
        """
        date_range = wizard.date_range
        if date_range is None:
            logger.warning("estimate.cart add_line rejected product=%s reason=dates_missing", product.id)
            return None
        check_in, check_out = date_range
        line = CartLine(
            id=self._new_line_id(product.id),
            product_id=product.id,
            name=product.name,
            type=product.type,
            check_in=check_in,
            check_out=check_out,
            quantity=max(1, int(quantity)),
        )
        self._lines.append(line)
        return line

    def remove_line(self, line_id: str) -> bool:
        before = len(self._lines)
        self._lines = [line for line in self._lines if line.id != line_id]
        return len(self._lines) != before

    def set_quantity(self, line_id: str, quantity: int) -> Optional[CartLine]:
        for line in self._lines:
            if line.id == line_id:
                line.quantity = max(1, int(quantity))
                return line
        return None

    def get_line(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self._lines if line.id == line_id), None)

    def line_amount(self, line: CartLine) -> int:
        return pricing.line_total(line, self.catalog)

    @property
    def total_amount(self) -> int:
        return pricing.cart_total(self._lines, self.catalog)

    def clear(self) -> None:
        self._lines = []

    def snapshot(self) -> Dict[str, Any]:
        """Vue figée du panier transmise à la création de commande."""
        items = []
        for line in self._lines:
            item = line.to_dict()
            item["amount"] = self.line_amount(line)
            items.append(item)
        return {"items": items, "totalAmount": sum(i["amount"] for i in items)}
