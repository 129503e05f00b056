"""
Formulaire de soumission vers la passerelle KISPG.
Les noms de champs, leur présence et leurs valeurs par défaut sont imposés par la passerelle:
ne pas renommer ni retirer de champ, même vide.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Optional
import re

from reservation.config import KISPG_URL
from reservation.payments.session import PaymentInit
from reservation.utils.templates import templates

DEFAULT_USER_IP = "0:0:0:0:0:0:0:1"
DEFAULT_MBS_IP = "127.0.0.1"


@dataclass(frozen=True)
class GatewayForm:
    action: str
    target: str
    fields: Dict[str, str] = field(default_factory=dict)
    method: str = "POST"
    accept_charset: str = "UTF-8"


def format_phone_number(tel: Optional[str]) -> str:
    """'010-1234-5678' -> '01012345678'"""
    return re.sub(r"\D", "", tel or "")


def _s(value) -> str:
    return "" if value is None else str(value)


def _email_local_part(email: Optional[str]) -> str:
    return (email or "").split("@", 1)[0] if "@" in (email or "") else ""


def build_form_fields(init: PaymentInit, *, order_ref: Optional[str] = None) -> "OrderedDict[str, str]":
    """
    Champs du POST KISPG, dans l'ordre attendu par la passerelle.
    order_ref sert de repli pour mbsUsrId / mbsReserved (défaut: moid).
    """
    ref = _s(order_ref or init.moid)
    fields = OrderedDict()
    fields["payMethod"] = "card"
    fields["trxCd"] = "0"
    fields["mid"] = _s(init.mid)
    fields["goodsNm"] = _s(init.item_name)
    fields["ordNo"] = _s(init.moid)
    fields["goodsAmt"] = _s(init.amt)
    fields["ordNm"] = _s(init.buyer_name)
    fields["ordTel"] = format_phone_number(init.buyer_tel)
    fields["ordEmail"] = _s(init.buyer_email)
    fields["returnUrl"] = _s(init.return_url)
    fields["userIp"] = _s(init.user_ip or DEFAULT_USER_IP)
    fields["mbsUsrId"] = _s(init.mbs_usr_id or _email_local_part(init.buyer_email) or ref)
    fields["ordGuardEmail"] = ""
    fields["rcvrAddr"] = ""
    fields["rcvrPost"] = ""
    fields["mbsIp"] = _s(init.user_ip or DEFAULT_MBS_IP)
    fields["mbsReserved"] = _s(init.mbs_reserved1 or ref)
    fields["rcvrMsg"] = ""
    fields["goodsSplAmt"] = _s(init.goods_spl_amt or "0")
    fields["goodsVat"] = _s(init.goods_vat or "0")
    fields["goodsSvsAmt"] = "0"
    fields["payReqType"] = "1"
    fields["model"] = "WEB"
    fields["charSet"] = "UTF-8"
    fields["ediDate"] = _s(init.edi_date)
    fields["encData"] = _s(init.request_hash)
    return fields


def build_gateway_form(init: PaymentInit, *, target: str, action: Optional[str] = None,
                       order_ref: Optional[str] = None) -> GatewayForm:
    return GatewayForm(
        action=action or KISPG_URL,
        target=target,
        fields=dict(build_form_fields(init, order_ref=order_ref)),
    )


def render_form_html(form: GatewayForm) -> str:
    """Document HTML auto-soumis (page de lancement et adaptateur navigateur)."""
    return templates.get_template("payment_launch.html").render(form=form)
