"""
Session Controller - owns the clicking session lifecycle.

States: IDLE -> LISTENING (hotkeys installed) -> CLICKING (click loop active).
Every transition runs on one SerialDispatchQueue thread; the only exception
is the escape fail-safe, which runs on the keyboard hook thread and ends the
process.
"""

from __future__ import annotations

import os
from typing import Callable, Dict, List, Optional

from clicker_engine import ClickHandle, ClickLoop
from dispatch_queue import SerialDispatchQueue
from errors import (
    AlreadyRunning,
    ClickerError,
    ConfigPersistFailed,
    HotkeyInstallFailed,
    NotRunning,
    PositionUnavailable,
)
from hotkey_manager import Action, HotkeyManager, ListenerFactory
from logger import StatusLogger
from models import (
    ClickerConfig,
    ClickPosition,
    KeyIdentifier,
    SessionEvent,
    SessionState,
)
from pointer import PyAutoGuiPointer
from position_cache import PositionCache
from settings_manager import SettingsManager

EMERGENCY_EXIT_CODE = 1
GRACEFUL_EXIT_CODE = 0


class SessionController:
    """Mediates between the hotkeys, the click loop and the presentation layer."""

    def __init__(
        self,
        settings_manager: Optional[SettingsManager] = None,
        pointer=None,
        logger: Optional[StatusLogger] = None,
        dispatch_queue: Optional[SerialDispatchQueue] = None,
        listener_factory: Optional[ListenerFactory] = None,
        exit_process: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.settings_manager = settings_manager or SettingsManager()
        self.logger = logger or StatusLogger()
        self._pointer = pointer or PyAutoGuiPointer()
        self._queue = dispatch_queue or SerialDispatchQueue()
        self._exit_process = exit_process or os._exit

        self._positions = PositionCache(self._pointer)
        self._click_loop = ClickLoop(self._pointer, self.logger)
        self._hotkeys = HotkeyManager(
            self._emergency_exit,
            dispatch=self._dispatch_action,
            listener_factory=listener_factory,
        )

        self._config: ClickerConfig = self.settings_manager.load()
        self._listening = False
        self._clicking = False
        self._handle: Optional[ClickHandle] = None
        self._closed = False

        self._status_callbacks: List[Callable[[SessionEvent], None]] = []
        self._quit_callback: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def register_status_callback(self, callback: Callable[[SessionEvent], None]) -> None:
        self._status_callbacks.append(callback)

    def register_quit_callback(self, callback: Callable[[], None]) -> None:
        """Called after the exit hotkey ends the session."""
        self._quit_callback = callback

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        if self._clicking:
            return SessionState.CLICKING
        if self._listening:
            return SessionState.LISTENING
        return SessionState.IDLE

    @property
    def listening(self) -> bool:
        return self._listening

    @property
    def clicking(self) -> bool:
        return self._clicking

    @property
    def position(self) -> Optional[ClickPosition]:
        return self._positions.get()

    @property
    def config(self) -> ClickerConfig:
        return self._config

    @property
    def active_handle(self) -> Optional[ClickHandle]:
        return self._handle

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def get_config(self) -> ClickerConfig:
        return self.settings_manager.load()

    def save_config(self, config: ClickerConfig) -> bool:
        """Persist ``config`` and apply it to the running session.

        Returns False when the file could not be written; the session keeps
        its previous configuration in that case.
        """
        return self._queue.call(self._save_config, config)

    def begin_session(self, config: Optional[ClickerConfig] = None) -> None:
        """Install the hotkeys. Clicking starts with the start key.

        Raises:
            HotkeyInstallFailed: if the keyboard hook cannot be registered
        """
        self._queue.call(self._begin_session, config or self._config)

    def end_session(self) -> None:
        self._queue.call(self._end_session)

    def start_clicking(self) -> bool:
        return self._queue.call(self._start_clicking)

    def stop_clicking(self) -> bool:
        return self._queue.call(self._stop_clicking)

    def update_position(self) -> Optional[ClickPosition]:
        return self._queue.call(self._update_position)

    def emergency_stop(self) -> None:
        """Run the escape fail-safe from any state, bypassing the dispatch queue."""
        self._emergency_exit()

    def shutdown(self) -> None:
        """End the session and stop the dispatch thread."""
        if self._closed:
            return
        self._queue.call(self._end_session)
        self._closed = True
        self._queue.shutdown()

    # ------------------------------------------------------------------
    # Transitions (dispatch thread only)
    # ------------------------------------------------------------------
    def _begin_session(self, config: ClickerConfig) -> None:
        if self._listening:
            self._apply_config(config)
            return

        self._hotkeys.install(self._build_mapping(config))
        self._config = config
        self._listening = True

        keys = config.keys
        self.logger.update_status(
            f"Listening for hotkeys: {keys.start}=start, {keys.stop}=stop, "
            f"{keys.exit}=exit, {keys.update_position}=update position, ESC=emergency stop"
        )
        self._emit(SessionEvent.SESSION_LISTENING)

    def _end_session(self) -> None:
        was_active = self._listening
        if self._clicking:
            self._click_loop.stop(self._handle)
            self._handle = None
            self._clicking = False

        self._hotkeys.uninstall()
        self._listening = False

        if was_active:
            self.logger.update_status("Session ended; hotkeys disabled")
            self._emit(SessionEvent.CLICKING_STOPPED)

    def _start_clicking(self) -> bool:
        keys = self._config.keys
        try:
            if not self._listening:
                raise NotRunning("Session is not active; start listening first.")
            if self._clicking:
                raise AlreadyRunning(f"Already clicking! Press {keys.stop} to stop first.")

            position = self._positions.get()
            if position is None:
                position = self._positions.refresh()
                self.logger.log_info(f"Position set to: {position}")

            self._handle = self._click_loop.start(position, self._config.interval_ms)
        except (AlreadyRunning, NotRunning, PositionUnavailable) as exc:
            self.logger.log_warning(str(exc))
            return False

        self._clicking = True
        self.logger.update_status(
            f"Auto clicking STARTED at {position} every {self._config.interval_ms} ms "
            f"(press {keys.stop} to stop, {keys.update_position} to update position)"
        )
        self._emit(SessionEvent.CLICKING_STARTED)
        return True

    def _stop_clicking(self) -> bool:
        if not self._clicking:
            self.logger.log_warning(
                f"Not currently clicking! Press {self._config.keys.start} to start."
            )
            return False

        handle = self._handle
        self._click_loop.stop(handle)
        self._handle = None
        self._clicking = False

        ticks = handle.ticks if handle else 0
        self.logger.update_status(f"Auto clicking STOPPED. Clicks fired: {ticks}")
        self._emit(SessionEvent.CLICKING_STOPPED)
        return True

    def _update_position(self) -> Optional[ClickPosition]:
        if not self._listening:
            self.logger.log_warning("Session is not active; position not updated.")
            return None

        try:
            position = self._positions.refresh()
        except PositionUnavailable as exc:
            self.logger.log_warning(f"Error updating position: {exc}")
            return None

        if self._clicking and self._handle is not None:
            self._click_loop.reposition(self._handle, position)
            self.logger.log_info(f"Click position updated to: {position} (used from the next click)")
        else:
            self.logger.log_info(f"Click position updated to: {position}")
        return position

    def _save_config(self, config: ClickerConfig) -> bool:
        try:
            self.settings_manager.save(config)
        except ConfigPersistFailed as exc:
            self.logger.log_error(str(exc))
            return False

        self.logger.log_info(f"Settings saved to {self.settings_manager.storage_path}")
        self._apply_config(config)
        return True

    def _apply_config(self, config: ClickerConfig) -> None:
        """Swap in a new configuration, restarting the click loop if it is running."""
        self._config = config
        if not self._listening:
            return

        was_clicking = self._clicking
        if was_clicking:
            self._click_loop.stop(self._handle)
            self._handle = None

        try:
            self._hotkeys.install(self._build_mapping(config))
        except HotkeyInstallFailed as exc:
            self._clicking = False
            self._listening = False
            self.logger.log_error(f"Hotkeys could not be reinstalled; session ended: {exc}")
            self._emit(SessionEvent.CLICKING_STOPPED)
            raise

        if was_clicking:
            self._handle = self._click_loop.start(self._positions.get(), config.interval_ms)
            self.logger.log_info(f"Clicker restarted with {config.interval_ms} ms interval")
        else:
            self.logger.log_info("Hotkeys updated")

    def _quit(self) -> None:
        self.logger.log_info("Exiting auto clicker...")
        self._end_session()
        if self._quit_callback is not None:
            self._quit_callback()
        else:
            self._exit_process(GRACEFUL_EXIT_CODE)

    def _emergency_exit(self) -> None:
        """Fail-safe bound to escape. Runs on the hook thread and never returns normally."""
        self.logger.log_error("EMERGENCY SHUTDOWN TRIGGERED")
        # Never wait on a tick here; it may be stuck in the platform call.
        self._click_loop.abort(self._click_loop.active_handle)
        self._hotkeys.uninstall()
        self._handle = None
        self._clicking = False
        self._listening = False
        self._exit_process(EMERGENCY_EXIT_CODE)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _build_mapping(self, config: ClickerConfig) -> Dict[KeyIdentifier, Action]:
        keys = config.keys
        return {
            KeyIdentifier(keys.start): self._start_clicking,
            KeyIdentifier(keys.stop): self._stop_clicking,
            KeyIdentifier(keys.exit): self._quit,
            KeyIdentifier(keys.update_position): self._update_position,
        }

    def _dispatch_action(self, action: Action) -> None:
        """Queue a hotkey action; called on the keyboard hook thread."""
        try:
            self._queue.submit(self._run_action, action)
        except RuntimeError:
            # Dispatch queue already shut down.
            pass

    def _run_action(self, action: Action) -> None:
        try:
            action()
        except ClickerError as exc:
            self.logger.log_error(str(exc))
        except Exception as exc:
            self.logger.log_error(f"Hotkey action failed: {exc}")

    def _emit(self, event: SessionEvent) -> None:
        for callback in list(self._status_callbacks):
            try:
                callback(event)
            except Exception as exc:
                self.logger.log_error(f"Status callback failed: {exc}")
