"""Starts the Hotkey Auto Clicker window; exits 0 when the window closes."""

import sys
import tkinter as tk
from gui import AutoClickerGUI


def _enable_high_dpi_awareness() -> None:
    if not sys.platform.startswith("win"):
        return

    try:
        import ctypes

        try:
            ctypes.windll.shcore.SetProcessDpiAwareness(2)
            return
        except AttributeError:
            pass

        try:
            ctypes.windll.user32.SetProcessDPIAware()
        except AttributeError:
            pass
    except OSError:
        # Ignore DPI awareness errors; Tk will fallback to default behaviour.
        pass


def main() -> int:
    """Escape ends the process from the keyboard hook with code 1 instead."""
    _enable_high_dpi_awareness()
    root = tk.Tk()
    AutoClickerGUI(root)
    root.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
