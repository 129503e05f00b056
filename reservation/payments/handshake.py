"""
Handshake de paiement côté client (popup + passerelle KISPG).

Déroulé de trigger():
1) garde "paiement déjà en cours" (aucun popup, aucune soumission)
2) ouverture d'un popup 825x700 centré, nommé par le PopupNamer de la session
3) soumission du formulaire KISPG dans le popup
4) watchdog (500 ms) sur la fermeture du popup + écoute du canal PAYMENT_RESULT
5) une seule transition terminale: COMPLETED (résultat reçu) ou ABANDONED (fermeture, délai)
"""
from typing import Any, Callable, Iterable, Optional
import asyncio
import logging

from reservation.config import (
    API_ORIGIN,
    BASE_URL,
    KISPG_URL,
    PAYMENT_POPUP_POLL_MS,
    PAYMENT_RESULT_TIMEOUT_SECONDS,
)
from reservation.payments.channel import ChannelMessage, MessageChannel, parse_payment_result
from reservation.payments.gateway import build_gateway_form
from reservation.payments.popup import PopupNamer, PopupWindow, WindowHost, centered_geometry
from reservation.payments.session import PaymentSession

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str, str], None]
CompleteCallback = Callable[[bool, Any], None]
CloseCallback = Callable[[], None]

ABANDON_POPUP_CLOSED = "popup_closed"
ABANDON_TIMEOUT = "timeout"
ABANDON_DISPOSED = "disposed"

_LEVELS = {"info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


def log_notifier(level: str, title: str, message: str) -> None:
    logger.log(_LEVELS.get(level, logging.INFO), "payments.notify %s: %s", title, message)


def default_allowed_origins() -> list:
    return [o for o in (BASE_URL, API_ORIGIN) if o]


class PaymentHandshake:
    def __init__(
        self,
        session: PaymentSession,
        host: WindowHost,
        channel: MessageChannel,
        *,
        on_complete: Optional[CompleteCallback] = None,
        on_close: Optional[CloseCallback] = None,
        notify: Optional[Notifier] = None,
        namer: Optional[PopupNamer] = None,
        allowed_origins: Optional[Iterable[str]] = None,
        gateway_url: Optional[str] = None,
        order_ref: Optional[str] = None,
        poll_interval: float = PAYMENT_POPUP_POLL_MS / 1000.0,
        result_timeout: float = PAYMENT_RESULT_TIMEOUT_SECONDS,
    ):
        self.session = session
        self.host = host
        self.channel = channel
        self.on_complete = on_complete
        self.on_close = on_close
        self.notify = notify or log_notifier
        self.namer = namer or PopupNamer()
        self.allowed_origins = list(allowed_origins) if allowed_origins is not None else default_allowed_origins()
        self.gateway_url = gateway_url or KISPG_URL
        self.order_ref = order_ref
        self.poll_interval = poll_interval
        self.result_timeout = result_timeout

        self._in_progress = False
        self._popup: Optional[PopupWindow] = None
        self._watchdog: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def popup(self) -> Optional[PopupWindow]:
        return self._popup

    async def trigger(self) -> bool:
        if self._in_progress:
            self.notify("info", "Notice", "A payment is already in progress.")
            return False

        # posé avant tout await: deux déclenchements immédiats n'ouvrent qu'un popup
        self._in_progress = True
        try:
            width, height = self.host.screen_size()
            geometry = centered_geometry(width, height)
            name = self.namer.next_name(self.session.order_id)

            popup = await self.host.open_popup(name, geometry.features())
            if popup is None:
                self._in_progress = False
                logger.info("payments.handshake popup blocked order=%s", self.session.order_id)
                self.notify("error", "Popup blocked", "Please allow popups for this site and try again.")
                return False

            self._popup = popup
            self.session.mark_popup_opened(name)
            self._unsubscribe = self.channel.subscribe(self._handle_message)

            form = build_gateway_form(self.session.init, target=name, action=self.gateway_url,
                                      order_ref=self.order_ref)
            await popup.submit_form(form)
            if not self._in_progress:
                # résultat déjà reçu pendant la soumission
                return True

            self.session.mark_awaiting_result()
            self._watchdog = asyncio.ensure_future(self._watch_popup())
            self._watchdog.add_done_callback(self._log_watchdog_exit)
            logger.info("payments.handshake started order=%s popup=%s", self.session.order_id, name)
            return True
        except Exception:
            logger.exception("payments.handshake.trigger failed order=%s", self.session.order_id)
            self.notify("error", "Payment error", "Cannot open the payment window. Please try again.")
            self._in_progress = False
            self._stop_listening()
            self._cancel_watchdog()
            await self._close_popup()
            return False

    async def _handle_message(self, message: ChannelMessage) -> None:
        if not self._in_progress:
            return
        result = parse_payment_result(message, allowed_origins=self.allowed_origins,
                                      order_id=self.session.order_id)
        if result is None:
            return

        self._in_progress = False
        self._cancel_watchdog()
        self._stop_listening()
        self.session.complete(result.success, result.data)
        logger.info("payments.handshake completed order=%s success=%s", result.order_id, result.success)
        await self._close_popup()
        if self.on_complete is not None:
            self.on_complete(result.success, result.data)

    async def _watch_popup(self) -> None:
        try:
            await self._poll_popup()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("payments.handshake watchdog failed order=%s", self.session.order_id)
            if self._in_progress:
                self._abandon(ABANDON_POPUP_CLOSED)

    def _log_watchdog_exit(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("payments.handshake watchdog stopped order=%s", self.session.order_id, exc_info=exc)

    def _popup_closed(self) -> bool:
        popup = self._popup
        if popup is None:
            return True
        try:
            return bool(popup.closed)
        except Exception:
            # fenêtre illisible (cible détruite): considérée fermée
            logger.exception("payments.handshake popup state unreadable order=%s", self.session.order_id)
            return True

    async def _poll_popup(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.result_timeout if self.result_timeout and self.result_timeout > 0 else None
        while self._in_progress:
            await asyncio.sleep(self.poll_interval)
            if not self._in_progress:
                return
            if self._popup_closed():
                self._abandon(ABANDON_POPUP_CLOSED)
                return
            if deadline is not None and loop.time() >= deadline:
                self._abandon(ABANDON_TIMEOUT)
                self.notify("warning", "Payment timed out", "No payment result was received. Please try again.")
                await self._close_popup()
                return

    def _abandon(self, reason: str) -> None:
        self._in_progress = False
        self._watchdog = None
        self._stop_listening()
        self.session.abandon(reason)
        logger.info("payments.handshake abandoned order=%s reason=%s", self.session.order_id, reason)
        if self.on_close is not None:
            self.on_close()

    async def dispose(self) -> None:
        """Libère écoute, watchdog et popup sans déclencher de callback."""
        was_running = self._in_progress
        self._in_progress = False
        self._cancel_watchdog()
        self._stop_listening()
        await self._close_popup()
        if was_running:
            self.session.abandon(ABANDON_DISPOSED)

    def _stop_listening(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _cancel_watchdog(self) -> None:
        task = self._watchdog
        self._watchdog = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _close_popup(self) -> None:
        popup = self._popup
        if popup is None:
            return
        try:
            if not popup.closed:
                await popup.close()
        except Exception:
            logger.exception("payments.handshake close popup failed order=%s", self.session.order_id)
