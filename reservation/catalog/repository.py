"""
Accès au catalogue des produits réservables (chambres, salles de séminaire).
- Source: table Supabase 'products' si configurée, sinon catalogue embarqué (catalog.data).
- Chargé une seule fois puis mis en cache (lecture seule).
"""
from typing import Dict, Iterable, List, Optional
import logging

import reservation.infra.supabase_client as supabase_client
from reservation.catalog import data
from reservation.catalog.models import Product, Room, Seminar, product_from_record

logger = logging.getLogger(__name__)

_catalog: Optional["Catalog"] = None


class Catalog:
    """Vue immuable du catalogue, indexée par id et par nom."""

    def __init__(self, products: Iterable[Product]):
        self._products: List[Product] = list(products)
        self._by_id: Dict[str, Product] = {p.id: p for p in self._products}
        self._by_name: Dict[str, Product] = {p.name: p for p in self._products}

    @property
    def rooms(self) -> List[Room]:
        return [p for p in self._products if isinstance(p, Room)]

    @property
    def seminars(self) -> List[Seminar]:
        return [p for p in self._products if isinstance(p, Seminar)]

    def find(self, key: str) -> Optional[Product]:
        """Résout un produit par id, puis par nom (les lignes historiques référencent le nom)."""
        if not key:
            return None
        return self._by_id.get(key) or self._by_name.get(key)

    def __len__(self) -> int:
        return len(self._products)

    def to_dict(self) -> Dict[str, list]:
        return {
            "rooms": [r.to_dict() for r in self.rooms],
            "seminars": [s.to_dict() for s in self.seminars],
        }


def fetch_product_records() -> List[dict]:
    """
    Récupère les enregistrements bruts de la table 'products'.
    - Retourne [] si Supabase n'est pas configuré ou en cas d'erreur.
    """
    if not supabase_client.is_configured():
        return []
    try:
        res = supabase_client.get_supabase().table("products").select("*").execute()
        return res.data or []
    except Exception:
        logger.exception("catalog.repository.fetch_product_records failed")
        return []


def bundled_records() -> List[dict]:
    return list(data.ROOM_RECORDS) + list(data.SEMINAR_RECORDS)


def load_catalog() -> Catalog:
    records = fetch_product_records()
    source = "supabase"
    if not records:
        records = bundled_records()
        source = "bundled"
    products = [p for p in (product_from_record(r) for r in records) if p is not None]
    logger.info("catalog.repository loaded products=%s source=%s", len(products), source)
    return Catalog(products)


def get_catalog() -> Catalog:
    global _catalog
    if _catalog is None:
        _catalog = load_catalog()
    return _catalog


def reset_catalog() -> None:
    """Vide le cache (tests, rechargement à chaud)."""
    global _catalog
    _catalog = None
