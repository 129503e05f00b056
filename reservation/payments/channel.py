"""
Canal de messages inter-fenêtres (équivalent de window.postMessage).
- subscribe() renvoie une fonction de désabonnement: l'écoute est limitée à une session.
- parse_payment_result() filtre l'origine (liste blanche) et l'identifiant de commande.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Union
import inspect
import logging

logger = logging.getLogger(__name__)

PAYMENT_RESULT_TYPE = "PAYMENT_RESULT"


@dataclass(frozen=True)
class ChannelMessage:
    origin: str
    data: Any


@dataclass(frozen=True)
class PaymentResult:
    order_id: str
    success: bool
    data: Any = None


Handler = Callable[[ChannelMessage], Union[None, Awaitable[None]]]


class MessageChannel:
    def __init__(self) -> None:
        self._handlers: List[Handler] = []

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    async def publish(self, origin: str, data: Any) -> int:
        """
        Diffuse un message à tous les abonnés (copie de la liste: un abonné peut se désabonner
        pendant la diffusion). L'échec d'un abonné est journalisé sans bloquer les autres.
        """
        message = ChannelMessage(origin=origin, data=data)
        delivered = 0
        for handler in list(self._handlers):
            try:
                res = handler(message)
                if inspect.isawaitable(res):
                    await res
                delivered += 1
            except Exception:
                logger.exception("payments.channel handler failed origin=%s", origin)
        return delivered


def normalize_origin(origin: Optional[str]) -> str:
    return (origin or "").strip().rstrip("/")


def parse_payment_result(message: ChannelMessage, *, allowed_origins: Iterable[str],
                         order_id: str) -> Optional[PaymentResult]:
    """
    Retourne le résultat si le message est recevable, sinon None (ignoré silencieusement):
    - origine hors liste blanche
    - type différent de PAYMENT_RESULT
    - orderId absent ou différent de la commande de la session
    """
    allowed = {normalize_origin(o) for o in allowed_origins if o}
    if normalize_origin(message.origin) not in allowed:
        logger.debug("payments.channel discarded origin=%s", message.origin)
        return None
    data = message.data
    if not isinstance(data, dict) or data.get("type") != PAYMENT_RESULT_TYPE:
        return None
    result_order = data.get("orderId")
    if result_order is None or str(result_order) != str(order_id):
        logger.debug("payments.channel discarded orderId=%s expected=%s", result_order, order_id)
        return None
    return PaymentResult(order_id=str(order_id), success=data.get("success") is True, data=data.get("data"))
