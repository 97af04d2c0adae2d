"""Exceptions raised by the clicker core."""


class ClickerError(Exception):
    """Base class for all clicker errors."""


class PositionUnavailable(ClickerError):
    """The platform could not report the pointer location."""


class ClickInjectionFailed(ClickerError):
    """Moving the pointer or synthesizing a click failed."""


class ConfigPersistFailed(ClickerError):
    """The configuration could not be written to disk."""


class AlreadyRunning(ClickerError):
    """A click loop is already active."""


class NotRunning(ClickerError):
    """No click loop is active."""


class HotkeyInstallFailed(ClickerError):
    """The global keyboard hook could not be registered."""
