"""
Session de paiement: payload d'initialisation (opaque, signé côté serveur) + cycle de vie.
CREATED -> POPUP_OPENED -> AWAITING_RESULT -> COMPLETED(succès|échec) | ABANDONED
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class PaymentStatus(str, Enum):
    CREATED = "created"
    POPUP_OPENED = "popup_opened"
    AWAITING_RESULT = "awaiting_result"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class PaymentInit:
    """Payload renvoyé par la création de commande (champs camelCase côté JSON)."""
    mid: str
    moid: str
    amt: str
    item_name: str
    buyer_name: str
    buyer_tel: str
    buyer_email: str
    request_hash: str
    edi_date: str
    return_url: str
    user_ip: Optional[str] = None
    mbs_usr_id: Optional[str] = None
    mbs_reserved1: Optional[str] = None
    goods_spl_amt: Optional[str] = None
    goods_vat: Optional[str] = None

    _KEYS = {
        "mid": "mid",
        "moid": "moid",
        "amt": "amt",
        "item_name": "itemName",
        "buyer_name": "buyerName",
        "buyer_tel": "buyerTel",
        "buyer_email": "buyerEmail",
        "request_hash": "requestHash",
        "edi_date": "ediDate",
        "return_url": "returnUrl",
        "user_ip": "userIp",
        "mbs_usr_id": "mbsUsrId",
        "mbs_reserved1": "mbsReserved1",
        "goods_spl_amt": "goodsSplAmt",
        "goods_vat": "goodsVat",
    }

    def to_dict(self) -> Dict[str, Any]:
        return {json_key: getattr(self, attr) for attr, json_key in self._KEYS.items()}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "PaymentInit":
        data = payload or {}
        kwargs = {}
        for attr, json_key in cls._KEYS.items():
            value = data.get(json_key, data.get(attr))
            kwargs[attr] = None if value is None else str(value)
        for required in ("mid", "moid", "amt", "item_name", "buyer_name", "buyer_tel",
                         "buyer_email", "request_hash", "edi_date", "return_url"):
            if kwargs.get(required) is None:
                kwargs[required] = ""
        return cls(**kwargs)


@dataclass
class PaymentSession:
    order_id: str
    init: PaymentInit
    status: PaymentStatus = PaymentStatus.CREATED
    success: Optional[bool] = None
    result_data: Any = None
    abandon_reason: Optional[str] = None
    popup_name: Optional[str] = None
    attempts: int = field(default=0)

    @property
    def is_terminal(self) -> bool:
        return self.status in (PaymentStatus.COMPLETED, PaymentStatus.ABANDONED)

    def mark_popup_opened(self, popup_name: str) -> None:
        self.status = PaymentStatus.POPUP_OPENED
        self.popup_name = popup_name
        self.success = None
        self.result_data = None
        self.abandon_reason = None
        self.attempts += 1

    def mark_awaiting_result(self) -> None:
        self.status = PaymentStatus.AWAITING_RESULT

    def complete(self, success: bool, data: Any = None) -> None:
        self.status = PaymentStatus.COMPLETED
        self.success = bool(success)
        self.result_data = data

    def abandon(self, reason: str) -> None:
        self.status = PaymentStatus.ABANDONED
        self.abandon_reason = reason
