"""
Module 'catalog' (feature-first): produits réservables en lecture seule.
"""

from .models import Room, Seminar, Product, ROOM, SEMINAR, SERVICES, product_from_record
from .repository import Catalog, get_catalog, load_catalog, reset_catalog

__all__ = [
    "Room",
    "Seminar",
    "Product",
    "ROOM",
    "SEMINAR",
    "SERVICES",
    "product_from_record",
    "Catalog",
    "get_catalog",
    "load_catalog",
    "reset_catalog",
]
