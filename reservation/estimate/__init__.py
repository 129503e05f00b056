"""
Module 'estimate' (feature-first): assistant de réservation, panier et calcul de prix.
"""

from .pricing import count_weekday_weekend, nights_between, line_total, cart_total, price_line
from .cart import Cart, CartLine
from .wizard import BookingWizard, STEP_SERVICES, STEP_DATES, STEP_ITEMS, STEP_REVIEW
from .store import Estimate, EstimateStore, get_estimate

__all__ = [
    # pricing
    "count_weekday_weekend",
    "nights_between",
    "line_total",
    "cart_total",
    "price_line",
    # cart
    "Cart",
    "CartLine",
    # wizard
    "BookingWizard",
    "STEP_SERVICES",
    "STEP_DATES",
    "STEP_ITEMS",
    "STEP_REVIEW",
    # store
    "Estimate",
    "EstimateStore",
    "get_estimate",
]
