from fastapi import APIRouter
from fastapi.responses import JSONResponse

from reservation.catalog.repository import get_catalog

router = APIRouter(prefix="/api/v1/catalog", tags=["Catalog API"])

@router.get("")
def list_products():
    """Catalogue public: {rooms: [...], seminars: [...]} (tarifs semaine/week-end ou forfait jour)."""
    return JSONResponse(get_catalog().to_dict())
