"""
Registre central des routers (catalogue, devis, paiements, health).
"""
from fastapi import FastAPI

from reservation.catalog import views as catalog_views
from reservation.estimate import views as estimate_views
from reservation.payments import views as payments_views
from reservation.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(catalog_views.router)
    app.include_router(estimate_views.router)
    app.include_router(payments_views.router)
    # Pages popup (lancement / retour passerelle)
    app.include_router(payments_views.pages_router)
    # Health & monitoring
    app.include_router(health_router)
