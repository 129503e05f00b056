"""
Adaptateur navigateur (Playwright) pour le handshake:
- PlaywrightWindowHost ouvre le popup via window.open sur la page opener
- PlaywrightPopup charge le formulaire auto-soumis dans le popup
- bridge_messages() relaie les événements 'message' de l'opener vers un MessageChannel
"""
from typing import Optional, Tuple
import logging

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from reservation.payments.channel import MessageChannel
from reservation.payments.gateway import GatewayForm, render_form_html

logger = logging.getLogger(__name__)

BINDING_NAME = "__reservationPaymentMessage"

_OPEN_POPUP_JS = "([name, features]) => !!window.open('about:blank', name, features)"
_SCREEN_JS = "() => [window.screen.width, window.screen.height]"
_LISTENER_JS = (
    "window.addEventListener('message', (event) => {"
    f"  window.{BINDING_NAME}(event.origin, event.data);"
    "});"
)


class PlaywrightPopup:
    def __init__(self, page: Page, name: str):
        self.page = page
        self.name = name

    @property
    def closed(self) -> bool:
        return self.page.is_closed()

    async def submit_form(self, form: GatewayForm) -> None:
        await self.page.set_content(render_form_html(form))

    async def close(self) -> None:
        if not self.page.is_closed():
            await self.page.close()


class PlaywrightWindowHost:
    def __init__(self, page: Page, screen: Tuple[int, int] = (1920, 1080), popup_timeout_ms: float = 5000):
        self.page = page
        self._screen = screen
        self.popup_timeout_ms = popup_timeout_ms

    async def refresh_screen_size(self) -> Tuple[int, int]:
        width, height = await self.page.evaluate(_SCREEN_JS)
        self._screen = (int(width), int(height))
        return self._screen

    def screen_size(self) -> Tuple[int, int]:
        return self._screen

    async def open_popup(self, name: str, features: str) -> Optional[PlaywrightPopup]:
        try:
            async with self.page.expect_popup(timeout=self.popup_timeout_ms) as popup_info:
                opened = await self.page.evaluate(_OPEN_POPUP_JS, [name, features])
                if not opened:
                    raise PlaywrightTimeoutError("window.open returned null")
            popup = await popup_info.value
        except PlaywrightTimeoutError:
            logger.info("payments.browser popup blocked name=%s", name)
            return None
        return PlaywrightPopup(popup, name)


async def bridge_messages(page: Page, channel: MessageChannel) -> None:
    """Relaie (origin, data) des messages reçus par la page opener vers le canal."""

    async def _forward(source, origin, data):
        await channel.publish(origin, data)

    await page.expose_binding(BINDING_NAME, _forward)
    await page.add_init_script(script=_LISTENER_JS)
    await page.evaluate(f"() => {{ {_LISTENER_JS} }}")
