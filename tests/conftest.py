"""Shared fakes for the platform wrappers."""

from __future__ import annotations

import threading
from types import SimpleNamespace
from typing import List, Optional

import pytest

from dispatch_queue import SerialDispatchQueue
from errors import ClickInjectionFailed, PositionUnavailable
from logger import StatusLogger
from models import ClickPosition
from session_controller import SessionController
from settings_manager import SettingsManager


def char_key(char: str, vk: Optional[int] = None):
    """A pynput-like KeyCode."""
    return SimpleNamespace(char=char, vk=vk)


def code_key(vk: int):
    """A KeyCode the platform reports without a character."""
    return SimpleNamespace(char=None, vk=vk)


ESC = SimpleNamespace(name="esc", value=SimpleNamespace(vk=27))


class FakePointer:
    def __init__(self, position: ClickPosition = ClickPosition(100, 200)) -> None:
        self.current = position
        self.queries = 0
        self.moves: List[ClickPosition] = []
        self.clicks = 0
        self.failures_to_inject = 0
        self.fail_position = False
        self._lock = threading.Lock()

    def position(self) -> ClickPosition:
        self.queries += 1
        if self.fail_position:
            raise PositionUnavailable("no display")
        return self.current

    def move_to(self, position: ClickPosition) -> None:
        with self._lock:
            if self.failures_to_inject > 0:
                self.failures_to_inject -= 1
                raise ClickInjectionFailed("injection blocked")
            self.moves.append(position)

    def click_left(self) -> None:
        with self._lock:
            self.clicks += 1


class FakeListener:
    def __init__(self, on_press, on_release) -> None:
        self.on_press = on_press
        self.on_release = on_release
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def tap(self, key) -> None:
        self.on_press(key)
        self.on_release(key)


class FakeListenerFactory:
    def __init__(self) -> None:
        self.listeners: List[FakeListener] = []
        self.fail = False

    def __call__(self, on_press, on_release) -> FakeListener:
        if self.fail:
            raise OSError("input monitoring not permitted")
        listener = FakeListener(on_press, on_release)
        self.listeners.append(listener)
        return listener

    @property
    def current(self) -> FakeListener:
        return self.listeners[-1]


class ExitRecorder:
    def __init__(self) -> None:
        self.codes: List[int] = []
        self.called = threading.Event()

    def __call__(self, code: int) -> None:
        self.codes.append(code)
        self.called.set()


@pytest.fixture
def pointer() -> FakePointer:
    return FakePointer()


@pytest.fixture
def listener_factory() -> FakeListenerFactory:
    return FakeListenerFactory()


@pytest.fixture
def exit_recorder() -> ExitRecorder:
    return ExitRecorder()


@pytest.fixture
def settings_manager(tmp_path) -> SettingsManager:
    return SettingsManager(tmp_path / "config.json")


@pytest.fixture
def dispatch_queue():
    q = SerialDispatchQueue()
    yield q
    q.shutdown()


@pytest.fixture
def controller(settings_manager, pointer, listener_factory, exit_recorder, dispatch_queue):
    ctrl = SessionController(
        settings_manager=settings_manager,
        pointer=pointer,
        logger=StatusLogger(),
        dispatch_queue=dispatch_queue,
        listener_factory=listener_factory,
        exit_process=exit_recorder,
    )
    yield ctrl
    ctrl.shutdown()


def flush(q: SerialDispatchQueue) -> None:
    """Wait until everything queued so far has run."""
    q.call(lambda: None)
