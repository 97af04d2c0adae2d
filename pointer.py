"""Thin wrapper around pyautogui for pointer queries and click synthesis."""

from __future__ import annotations

from typing import Any, Optional

from errors import ClickInjectionFailed, PositionUnavailable
from models import ClickPosition


class PyAutoGuiPointer:
    """Moves, clicks and queries the system pointer through pyautogui.

    pyautogui is imported on first use so the rest of the application can be
    imported on machines without a display.
    """

    def __init__(self) -> None:
        self._backend: Optional[Any] = None

    def position(self) -> ClickPosition:
        try:
            x, y = self._pyautogui().position()
        except Exception as exc:
            raise PositionUnavailable(f"Could not read pointer position: {exc}") from exc
        return ClickPosition(int(x), int(y))

    def move_to(self, position: ClickPosition) -> None:
        try:
            self._pyautogui().moveTo(*position.to_tuple())
        except Exception as exc:
            raise ClickInjectionFailed(f"Could not move pointer to {position}: {exc}") from exc

    def click_left(self) -> None:
        try:
            self._pyautogui().click(button="left")
        except Exception as exc:
            raise ClickInjectionFailed(f"Could not click: {exc}") from exc

    def _pyautogui(self) -> Any:
        if self._backend is None:
            import pyautogui  # type: ignore

            # Moving the mouse into a screen corner makes ticks fail until it leaves.
            pyautogui.FAILSAFE = True
            # The click interval alone sets the cadence.
            pyautogui.PAUSE = 0.0
            self._backend = pyautogui
        return self._backend
