"""
Factory d'application pour les entrypoints (reservation.asgi, tests).
"""
from fastapi import FastAPI

from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_no_cache_middleware, register_security_middleware
from .routers import register_routers
from .routes import register_routes


def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares de base, sécurité (CSP), no-cache
      - gestionnaire d'exceptions et routes simples
      - routers catalogue, devis, paiements, health
    """
    app = FastAPI(title="Reservation API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_no_cache_middleware(app)
    register_exception_handlers(app)
    register_routes(app)
    register_routers(app)
    return app
