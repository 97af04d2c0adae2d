import argparse
import threading

import pytest

from cli import EXIT_OK, EXIT_USAGE, build_arg_parser, build_config_from_args, main
from conftest import FakeListenerFactory, FakePointer, char_key
from models import ClickerConfig, KeyBindings
from session_controller import SessionController
from settings_manager import SettingsManager


def parse(*argv) -> argparse.Namespace:
    return build_arg_parser().parse_args(list(argv))


def test_no_overrides_keeps_stored_config():
    base = ClickerConfig(interval_ms=40, keys=KeyBindings(start="a", stop="b", exit="c", update_position="d"))

    assert build_config_from_args(parse(), base) == base


def test_overrides_replace_individual_values():
    config = build_config_from_args(parse("--interval", "25", "--start", "s", "--update", "u"), ClickerConfig())

    assert config.interval_ms == 25
    assert config.keys == KeyBindings(start="s", stop="2", exit="3", update_position="u")


def test_conflicting_override_is_rejected():
    with pytest.raises(ValueError):
        build_config_from_args(parse("--start", "2"), ClickerConfig())


def test_main_rejects_invalid_interval(tmp_path, capsys):
    code = main(["--config", str(tmp_path / "c.json"), "--interval", "0"])

    assert code == EXIT_USAGE
    assert "Invalid configuration" in capsys.readouterr().out


def make_factory(listener_factory, exit_codes):
    def factory(**kwargs):
        return SessionController(
            pointer=FakePointer(),
            listener_factory=listener_factory,
            exit_process=exit_codes.append,
            **kwargs,
        )
    return factory


def test_main_reports_missing_hotkey_backend(tmp_path, capsys):
    listeners = FakeListenerFactory()
    listeners.fail = True

    code = main(["--config", str(tmp_path / "c.json")], controller_factory=make_factory(listeners, []))

    assert code == EXIT_USAGE
    assert "Global hotkeys are unavailable" in capsys.readouterr().out


def test_main_runs_until_exit_key(tmp_path, capsys):
    listeners = FakeListenerFactory()
    exit_codes = []

    def press_exit_when_ready():
        for _ in range(200):
            if listeners.listeners and listeners.current.started:
                break
            threading.Event().wait(0.01)
        listeners.current.tap(char_key("x"))

    presser = threading.Thread(target=press_exit_when_ready)
    presser.start()
    code = main(
        ["--config", str(tmp_path / "c.json"), "--exit", "x", "--save"],
        controller_factory=make_factory(listeners, exit_codes),
    )
    presser.join(timeout=2)

    out = capsys.readouterr().out
    assert code == EXIT_OK
    assert exit_codes == []
    assert "x   - Exit program" in out
    assert "ESC - Emergency stop" in out
    assert listeners.current.stopped
    assert SettingsManager(tmp_path / "c.json").load().keys.exit == "x"


def test_help_documents_every_exit_code(capsys):
    with pytest.raises(SystemExit):
        build_arg_parser().parse_args(["--help"])

    out = " ".join(capsys.readouterr().out.split())
    assert "0 normal quit" in out
    assert "1 emergency stop (ESC)" in out
    assert "2 invalid arguments or global hotkeys unavailable" in out
