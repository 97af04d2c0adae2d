"""Platform-agnostic global hotkey dispatcher built on top of pynput."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional

from errors import HotkeyInstallFailed
from models import ESCAPE_KEY, KeyEvent, KeyIdentifier

try:
    from pynput import keyboard  # type: ignore
except Exception as _e:  # pragma: no cover - environment dependent
    keyboard = None  # type: ignore


Action = Callable[[], None]
ListenerFactory = Callable[[Callable[[Any], None], Callable[[Any], None]], Any]


def key_event_from_pynput(key: Any, pressed: bool) -> KeyEvent:
    """Translate a pynput ``Key``/``KeyCode`` into a KeyEvent."""
    name = getattr(key, "char", None)
    if not name:
        name = getattr(key, "name", None)

    raw_code = getattr(key, "vk", None)
    if raw_code is None:
        raw_code = getattr(getattr(key, "value", None), "vk", None)

    return KeyEvent(name=name, raw_code=raw_code, is_press_down=pressed)


class HotkeyManager:
    """Maps global key-down events to actions, independent of window focus.

    The escape key is reserved for the emergency callback and is checked
    before any user binding.
    """

    def __init__(
        self,
        emergency_callback: Action,
        dispatch: Optional[Callable[[Action], Any]] = None,
        listener_factory: Optional[ListenerFactory] = None,
    ) -> None:
        self._emergency_callback = emergency_callback
        self._dispatch = dispatch
        self._listener_factory = listener_factory
        self._mapping: Dict[KeyIdentifier, Action] = {}
        self._listener: Optional[Any] = None
        self._lock = threading.Lock()

    def is_installed(self) -> bool:
        with self._lock:
            return self._listener is not None

    @property
    def bindings(self) -> Dict[KeyIdentifier, Action]:
        with self._lock:
            return dict(self._mapping)

    def install(self, mapping: Dict[KeyIdentifier, Action]) -> None:
        """Subscribe to the system-wide key stream, replacing any previous mapping.

        Raises:
            HotkeyInstallFailed: if the keyboard hook cannot be registered
        """
        self.uninstall()

        factory = self._listener_factory or self._default_listener_factory
        try:
            listener = factory(self._on_press, self._on_release)
            # Bindings must be in place before the first event can arrive.
            with self._lock:
                self._mapping = dict(mapping)
                self._listener = listener
            listener.start()
        except Exception as exc:
            with self._lock:
                self._mapping = {}
                self._listener = None
            if isinstance(exc, HotkeyInstallFailed):
                raise
            raise HotkeyInstallFailed(f"Failed to register hotkeys: {exc}") from exc

    def uninstall(self) -> None:
        """Unsubscribe. Idempotent and safe to call from within a handler."""
        with self._lock:
            listener = self._listener
            self._listener = None
            self._mapping = {}

        if listener is not None:
            try:
                listener.stop()
            except Exception:
                # The hook thread may already be gone.
                pass

    def handle_event(self, event: KeyEvent) -> None:
        """Run the actions bound to a key event. Key-up events are ignored."""
        if not event.is_press_down:
            return

        with self._lock:
            if self._listener is None:
                return
            mapping = dict(self._mapping)

        if ESCAPE_KEY.matches(event):
            self._emergency_callback()
            return

        for key, action in mapping.items():
            if key.matches(event):
                if self._dispatch is not None:
                    self._dispatch(action)
                else:
                    action()

    def _on_press(self, key: Any) -> None:
        self.handle_event(key_event_from_pynput(key, True))

    def _on_release(self, key: Any) -> None:
        self.handle_event(key_event_from_pynput(key, False))

    @staticmethod
    def _default_listener_factory(on_press, on_release) -> Any:
        if keyboard is None:
            raise HotkeyInstallFailed("pynput/keyboard backend not available; global hotkeys disabled")
        return keyboard.Listener(on_press=on_press, on_release=on_release)
