"""
Fenêtre popup de paiement: géométrie centrée, nommage unique et contrats d'hôte.
Les implémentations concrètes (navigateur Playwright, faux objets de test) respectent
WindowHost / PopupWindow.
"""
from dataclasses import dataclass
from itertools import count
from typing import Optional, Protocol, Tuple, runtime_checkable

POPUP_WIDTH = 825
POPUP_HEIGHT = 700


@dataclass(frozen=True)
class PopupGeometry:
    width: int
    height: int
    left: int
    top: int

    def features(self) -> str:
        return (
            f"width={self.width},height={self.height},left={self.left},top={self.top},"
            "resizable=yes,scrollbars=yes,status=yes"
        )


def centered_geometry(screen_width: int, screen_height: int,
                      width: int = POPUP_WIDTH, height: int = POPUP_HEIGHT) -> PopupGeometry:
    """Centre le popup sur l'écran (coordonnées négatives ramenées à 0)."""
    left = max(0, (int(screen_width) - width) // 2)
    top = max(0, (int(screen_height) - height) // 2)
    return PopupGeometry(width=width, height=height, left=left, top=top)


class PopupNamer:
    """
    Fabrique de noms de fenêtre, propre à une session de paiement.
    Le compteur monotone évite les collisions lors de relances rapides.
    """

    def __init__(self, prefix: str = "kispg_payment"):
        self.prefix = prefix
        self._counter = count(1)

    def next_name(self, order_id: str) -> str:
        return f"{self.prefix}_{order_id}_{next(self._counter)}"


@runtime_checkable
class PopupWindow(Protocol):
    name: str

    @property
    def closed(self) -> bool: ...

    async def submit_form(self, form) -> None: ...

    async def close(self) -> None: ...


class WindowHost(Protocol):
    def screen_size(self) -> Tuple[int, int]: ...

    async def open_popup(self, name: str, features: str) -> Optional[PopupWindow]: ...
