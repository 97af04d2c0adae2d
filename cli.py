"""
Terminal front end: global hotkeys only, no window.

Usage:
    hotkey-clicker --interval 50 --start 1 --stop 2
"""

from __future__ import annotations

import argparse
import dataclasses
import threading
from pathlib import Path
from typing import Callable, List, Optional

from errors import HotkeyInstallFailed
from logger import StatusLogger
from models import ClickerConfig
from session_controller import EMERGENCY_EXIT_CODE, SessionController
from settings_manager import SettingsManager

EXIT_OK = 0
EXIT_EMERGENCY = EMERGENCY_EXIT_CODE
EXIT_USAGE = 2

EXIT_CODES_HELP = (
    f"exit codes: {EXIT_OK} normal quit (exit key or Ctrl+C), "
    f"{EXIT_EMERGENCY} emergency stop (ESC), "
    f"{EXIT_USAGE} invalid arguments or global hotkeys unavailable"
)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Click at a fixed screen position, controlled by global hotkeys.",
        epilog=EXIT_CODES_HELP,
    )
    p.add_argument("--config", help="Path to the JSON configuration file.")
    p.add_argument("--interval", type=int, help="Milliseconds between clicks (e.g. 100).")
    p.add_argument("--start", help="Key that starts clicking.")
    p.add_argument("--stop", help="Key that stops clicking.")
    p.add_argument("--exit", help="Key that exits the program.")
    p.add_argument("--update", help="Key that moves the click target to the mouse.")
    p.add_argument("--save", action="store_true", help="Save the effective configuration before starting.")
    return p


def build_config_from_args(args: argparse.Namespace, base: ClickerConfig) -> ClickerConfig:
    """Apply command-line overrides on top of the stored configuration."""
    key_overrides = {}
    if args.start is not None:
        key_overrides["start"] = args.start
    if args.stop is not None:
        key_overrides["stop"] = args.stop
    if args.exit is not None:
        key_overrides["exit"] = args.exit
    if args.update is not None:
        key_overrides["update_position"] = args.update

    keys = dataclasses.replace(base.keys, **key_overrides)
    interval = args.interval if args.interval is not None else base.interval_ms
    return ClickerConfig(interval_ms=interval, keys=keys)


def print_banner(config: ClickerConfig) -> None:
    keys = config.keys
    print("=== Hotkey Auto Clicker ===")
    print("Global Hotkeys (work even when the terminal is not focused):")
    print(f"  {keys.start}   - Start clicking")
    print(f"  {keys.stop}   - Stop clicking")
    print(f"  {keys.exit}   - Exit program")
    print(f"  {keys.update_position}   - Update click position to current mouse location")
    print("  ESC - Emergency stop (exits immediately)")
    print(f"Click interval: {config.interval_ms}ms ({config.clicks_per_second():.1f} clicks/second)")
    print()
    print(f"Tip: Position your mouse where you want to click, then press {keys.start}.")
    print(f"     Press {keys.update_position} anytime to update the click position.")
    print()


def main(
    argv: Optional[List[str]] = None,
    controller_factory: Callable[..., SessionController] = SessionController,
) -> int:
    args = build_arg_parser().parse_args(argv)

    settings_manager = SettingsManager(Path(args.config) if args.config else None)
    try:
        config = build_config_from_args(args, settings_manager.load())
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        return EXIT_USAGE

    logger = StatusLogger()
    logger.add_listener(print)
    controller = controller_factory(settings_manager=settings_manager, logger=logger)

    done = threading.Event()
    controller.register_quit_callback(done.set)

    try:
        if args.save and not controller.save_config(config):
            print("Configuration could not be saved; continuing with unsaved settings.")

        print_banner(config)
        try:
            controller.begin_session(config)
        except HotkeyInstallFailed as exc:
            print(f"Global hotkeys are unavailable: {exc}")
            print("Check input-monitoring/accessibility permissions and try again.")
            return EXIT_USAGE

        # Wake periodically so Ctrl+C is delivered on every platform.
        while not done.wait(0.5):
            pass
    except KeyboardInterrupt:
        print("\nExiting auto clicker...")
    finally:
        controller.shutdown()

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
