from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

import reservation.infra.supabase_client as supabase_client
from reservation.catalog import get_catalog
from reservation.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root():
    return {"ok": True}


@router.get("/catalog")
def health_catalog():
    catalog = get_catalog()
    return JSONResponse({
        "supabase": supabase_client.is_configured(),
        "rooms": len(catalog.rooms),
        "seminars": len(catalog.seminars),
    })


@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return JSONResponse(rate_limit_health_info(request))
