"""
Calcul de prix pur (pas de DB, pas de réseau).
- Chambres: facturation à la nuit, tarif semaine / week-end (samedi, dimanche = week-end).
- Séminaires: facturation au jour, bornes incluses (nuits + 1), quantité non appliquée.
- Une ligne dont le produit est introuvable contribue 0 au total.
"""
from datetime import date, timedelta
from typing import Iterable, Optional, Tuple

from reservation.catalog.models import Product, Room, Seminar

# date.weekday(): lundi=0 ... samedi=5, dimanche=6
WEEKEND_DAYS = (5, 6)

# module reservation.estimate.pricing
def count_weekday_weekend(check_in: date, check_out: date) -> Tuple[int, int]:
    """
    Compte les nuits de l'intervalle semi-ouvert [check_in, check_out) par type de jour.
    Retourne (weekday, weekend); (0, 0) si check_out <= check_in.
    """
    weekday = 0
    weekend = 0
    d = check_in
    while d < check_out:
        if d.weekday() in WEEKEND_DAYS:
            weekend += 1
        else:
            weekday += 1
        d += timedelta(days=1)
    return weekday, weekend

def nights_between(check_in: date, check_out: date) -> int:
    return (check_out - check_in).days

def room_line_total(room: Room, check_in: date, check_out: date, quantity: int) -> int:
    weekday, weekend = count_weekday_weekend(check_in, check_out)
    return (room.weekday_price * weekday + room.weekend_price * weekend) * quantity

def seminar_line_total(seminar: Seminar, check_in: date, check_out: date) -> int:
    days = nights_between(check_in, check_out) + 1
    return seminar.price * days

def price_line(product: Optional[Product], check_in: date, check_out: date, quantity: int) -> int:
    """Prix d'une ligne pour un produit déjà résolu (0 si produit absent)."""
    if isinstance(product, Room):
        return room_line_total(product, check_in, check_out, quantity)
    if isinstance(product, Seminar):
        return seminar_line_total(product, check_in, check_out)
    return 0

def line_total(line, catalog) -> int:
    """
    Prix d'une ligne du panier.
    - Résout le produit via catalog.find(product_id) puis catalog.find(name).
    - Le type de la ligne doit correspondre au type du produit, sinon 0.
    """
    product = catalog.find(line.product_id) or catalog.find(line.name)
    if product is None or product.type != line.type:
        return 0
    return price_line(product, line.check_in, line.check_out, line.quantity)

def cart_total(lines: Iterable, catalog) -> int:
    """Recalcule le total complet à partir des lignes courantes (jamais de valeur en cache)."""
    return sum(line_total(line, catalog) for line in lines)
