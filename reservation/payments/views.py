import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, EmailStr, Field

from reservation.estimate.store import Estimate, get_estimate, peek_estimate
from reservation.orders import service as orders_service
from reservation.payments import service as payments_service
from reservation.payments.gateway import build_gateway_form
from reservation.utils.rate_limit import optional_rate_limit
from reservation.utils.templates import templates

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])
pages_router = APIRouter(prefix="/payment", tags=["Payments"])


class PaymentInitRequest(BaseModel):
    buyer_name: str = Field(min_length=1)
    buyer_tel: str = Field(min_length=1)
    buyer_email: EmailStr


# module reservation.payments.views
@router.post("/init", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def init_payment(payload: PaymentInitRequest, request: Request, estimate: Estimate = Depends(get_estimate)):
    """
    Crée la commande à partir du panier de la session et renvoie le payload KISPG.
    - 400: panier vide / montant nul ; 502: commande non enregistrée
    """
    buyer = {"name": payload.buyer_name, "tel": payload.buyer_tel, "email": str(payload.buyer_email)}
    user_ip = request.client.host if request.client else None
    return JSONResponse(payments_service.init_payment(estimate, buyer, user_ip=user_ip))


@router.get("/{order_no}/status")
async def payment_status(order_no: str, estimate: Estimate = Depends(peek_estimate)):
    return JSONResponse(payments_service.order_status(order_no, estimate))


@pages_router.get("/launch/{order_no}", response_class=HTMLResponse)
async def launch_page(order_no: str, request: Request):
    """Page ouverte dans le popup: formulaire KISPG auto-soumis dans la même fenêtre."""
    init = orders_service.get_payment_init(order_no)
    form = build_gateway_form(init, target="_self")
    return templates.TemplateResponse(request, "payment_launch.html", {"form": form})


@pages_router.api_route("/kispg-return", methods=["GET", "POST"], response_class=HTMLResponse)
async def kispg_return(request: Request):
    """Retour navigateur de la passerelle: enregistre le statut et notifie la fenêtre opener."""
    params = dict(request.query_params)
    if request.method == "POST":
        form = await request.form()
        params.update({k: v for k, v in form.items() if isinstance(v, str)})
    context = payments_service.handle_gateway_return(params)
    return templates.TemplateResponse(request, "payment_return.html", context)
