"""
Graphical user interface for the Hotkey Auto Clicker.

Key capabilities
----------------
- Edit the click interval and the four hotkeys, and persist them
- Start/stop listening for global hotkeys
- Show session status and a live log with export
"""

from __future__ import annotations

import queue
import tkinter as tk
from tkinter import ttk, messagebox, scrolledtext
from typing import Any, Callable, Optional, Tuple

from errors import HotkeyInstallFailed
from logger import LogEntry
from models import ClickerConfig, KeyBindings, SessionEvent
from session_controller import SessionController


class AutoClickerGUI:
    """Tkinter window over a SessionController.

    Controller callbacks arrive on worker threads; they are queued and
    drained on the Tk thread by a polling job.
    """

    UI_POLL_MS = 50
    INTERVAL_RANGE_MS = (10, 2000)
    WINDOW_SIZE = (560, 640)

    def __init__(self, root: tk.Tk, controller: Optional[SessionController] = None):
        self.root = root
        self.root.title("Hotkey Auto Clicker")
        width, height = self.WINDOW_SIZE
        self.root.geometry(f"{width}x{height}")
        self.root.minsize(width, height)

        self.controller = controller or SessionController()
        self.logger = self.controller.logger
        self._ui_events: "queue.Queue[Tuple[Callable[..., None], Any]]" = queue.Queue()
        self.poll_job: Optional[str] = None

        config = self.controller.get_config()

        # Tk variables ---------------------------------------------------
        self.interval_var = tk.IntVar(value=config.interval_ms)
        self.interval_label_var = tk.StringVar(value="")
        self.cps_var = tk.StringVar(value="")
        self.start_key_var = tk.StringVar(value=config.keys.start.upper())
        self.stop_key_var = tk.StringVar(value=config.keys.stop.upper())
        self.exit_key_var = tk.StringVar(value=config.keys.exit.upper())
        self.update_key_var = tk.StringVar(value=config.keys.update_position.upper())
        self.status_var = tk.StringVar(value="Status: Ready")

        self.interval_var.trace_add("write", lambda *_: self._update_interval_display())
        for var in (self.start_key_var, self.stop_key_var, self.exit_key_var, self.update_key_var):
            var.trace_add("write", lambda *_, v=var: self._normalize_key_var(v))

        # UI --------------------------------------------------------------
        self._build_ui()
        self._update_interval_display()
        self._set_listening_controls(False)

        # Services -------------------------------------------------------
        self.logger.add_listener(lambda entry: self._ui_events.put((self._append_log, entry)))
        self.controller.register_status_callback(
            lambda event: self._ui_events.put((self._on_session_event, event))
        )
        self.controller.register_quit_callback(lambda: self._ui_events.put((self._on_quit_hotkey, None)))
        self._poll_ui_events()

        self.root.protocol("WM_DELETE_WINDOW", self._on_closing)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        container = ttk.Frame(self.root, padding=16)
        container.pack(fill=tk.BOTH, expand=True)
        container.columnconfigure(0, weight=1)
        container.rowconfigure(3, weight=1)

        self._build_interval_section(container, row=0)
        self._build_keys_section(container, row=1)
        self._build_controls_section(container, row=2)
        self._build_log_section(container, row=3)

    def _build_interval_section(self, parent: ttk.Frame, row: int) -> None:
        frame = ttk.LabelFrame(parent, text="Click interval", padding=12)
        frame.grid(row=row, column=0, sticky="ew", pady=(0, 12))
        frame.columnconfigure(0, weight=1)

        low, high = self.INTERVAL_RANGE_MS
        tk.Scale(
            frame,
            from_=low,
            to=high,
            orient=tk.HORIZONTAL,
            variable=self.interval_var,
            showvalue=False,
            resolution=10,
        ).grid(row=0, column=0, columnspan=2, sticky="ew")

        ttk.Label(frame, textvariable=self.interval_label_var).grid(row=1, column=0, sticky="w")
        ttk.Label(frame, textvariable=self.cps_var).grid(row=1, column=1, sticky="e")

    def _build_keys_section(self, parent: ttk.Frame, row: int) -> None:
        frame = ttk.LabelFrame(parent, text="Hotkeys", padding=12)
        frame.grid(row=row, column=0, sticky="ew", pady=(0, 12))
        frame.columnconfigure(1, weight=1)

        validate = (self.root.register(self._validate_key_entry), "%P")
        fields = (
            ("Start clicking", self.start_key_var),
            ("Stop clicking", self.stop_key_var),
            ("Exit program", self.exit_key_var),
            ("Update position", self.update_key_var),
        )
        for index, (label, var) in enumerate(fields):
            ttk.Label(frame, text=label).grid(row=index, column=0, sticky="w", pady=2)
            ttk.Entry(
                frame,
                textvariable=var,
                width=4,
                justify="center",
                validate="key",
                validatecommand=validate,
            ).grid(row=index, column=1, sticky="w", padx=(12, 0), pady=2)

        ttk.Label(frame, text="ESC always triggers an emergency stop.").grid(
            row=len(fields), column=0, columnspan=2, sticky="w", pady=(8, 0)
        )

    def _build_controls_section(self, parent: ttk.Frame, row: int) -> None:
        frame = ttk.Frame(parent)
        frame.grid(row=row, column=0, sticky="ew", pady=(0, 12))
        frame.columnconfigure((0, 1, 2), weight=1)

        ttk.Button(frame, text="Save settings", command=self._save_settings).grid(
            row=0, column=0, padx=(0, 6), sticky="ew"
        )
        self.start_button = ttk.Button(frame, text="Start", command=self._start_listening)
        self.start_button.grid(row=0, column=1, padx=6, sticky="ew")
        self.stop_button = ttk.Button(frame, text="Stop", command=self._stop_listening)
        self.stop_button.grid(row=0, column=2, padx=(6, 0), sticky="ew")

        ttk.Label(frame, textvariable=self.status_var).grid(
            row=1, column=0, columnspan=3, sticky="w", pady=(12, 0)
        )

    def _build_log_section(self, parent: ttk.Frame, row: int) -> None:
        frame = ttk.LabelFrame(parent, text="Log", padding=12)
        frame.grid(row=row, column=0, sticky="nsew")
        frame.columnconfigure(0, weight=1)
        frame.rowconfigure(0, weight=1)

        self.log_text = scrolledtext.ScrolledText(frame, height=10, state=tk.DISABLED, wrap=tk.WORD)
        self.log_text.grid(row=0, column=0, sticky="nsew")

        ttk.Button(frame, text="Export log", command=self._export_logs).grid(
            row=1, column=0, sticky="e", pady=(8, 0)
        )

    # ------------------------------------------------------------------
    # Input helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _validate_key_entry(proposed: str) -> bool:
        return len(proposed) <= 1 and (proposed == "" or proposed.isalnum())

    @staticmethod
    def _normalize_key_var(var: tk.StringVar) -> None:
        value = var.get()
        if value != value.upper():
            var.set(value.upper())

    def _update_interval_display(self) -> None:
        try:
            interval = int(self.interval_var.get())
        except (tk.TclError, ValueError):
            return
        interval = max(interval, 1)
        self.interval_label_var.set(f"{interval} ms")
        self.cps_var.set(f"{1000 / interval:.1f} clicks/second")

    def _read_config(self) -> Optional[ClickerConfig]:
        defaults = KeyBindings()
        try:
            return ClickerConfig(
                interval_ms=int(self.interval_var.get()),
                keys=KeyBindings(
                    start=self.start_key_var.get() or defaults.start,
                    stop=self.stop_key_var.get() or defaults.stop,
                    exit=self.exit_key_var.get() or defaults.exit,
                    update_position=self.update_key_var.get() or defaults.update_position,
                ),
            )
        except (ValueError, tk.TclError) as exc:
            messagebox.showerror("Invalid settings", str(exc))
            return None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def _save_settings(self) -> None:
        config = self._read_config()
        if config is None:
            return
        try:
            saved = self.controller.save_config(config)
        except HotkeyInstallFailed as exc:
            self._set_listening_controls(False)
            messagebox.showerror("Hotkeys", f"Settings saved, but hotkeys could not be reinstalled:\n{exc}")
            return

        if not saved:
            self.status_var.set("Status: Error saving settings")
            messagebox.showerror("Settings", "Settings could not be saved.")
        elif self.controller.clicking:
            self.status_var.set("Status: Settings saved; clicker restarted with new settings")
        else:
            self.status_var.set("Status: Settings saved successfully")

    def _start_listening(self) -> None:
        config = self._read_config()
        if config is None:
            return
        try:
            self.controller.begin_session(config)
        except HotkeyInstallFailed as exc:
            messagebox.showerror(
                "Hotkeys",
                f"Global hotkeys could not be registered. Check system permissions.\n{exc}",
            )

    def _stop_listening(self) -> None:
        self.controller.end_session()
        self._set_listening_controls(False)
        self.status_var.set("Status: Clicker stopped and key bindings disabled")

    # ------------------------------------------------------------------
    # Controller events (Tk thread)
    # ------------------------------------------------------------------
    def _poll_ui_events(self) -> None:
        while True:
            try:
                handler, payload = self._ui_events.get_nowait()
            except queue.Empty:
                break
            handler(payload)
        self.poll_job = self.root.after(self.UI_POLL_MS, self._poll_ui_events)

    def _on_session_event(self, event: SessionEvent) -> None:
        keys = self.controller.config.keys
        if event is SessionEvent.SESSION_LISTENING:
            self._set_listening_controls(True)
            self.status_var.set(f"Status: Listening. Press {keys.start} to begin clicking.")
        elif event is SessionEvent.CLICKING_STARTED:
            self.status_var.set("Status: Clicking started!")
        elif event is SessionEvent.CLICKING_STOPPED:
            if self.controller.listening:
                self.status_var.set("Status: Clicking stopped. Key bindings still active.")
            else:
                self._set_listening_controls(False)

    def _on_quit_hotkey(self, _payload: Any) -> None:
        self._on_closing()

    def _set_listening_controls(self, listening: bool) -> None:
        self.start_button.configure(state=tk.DISABLED if listening else tk.NORMAL)
        self.stop_button.configure(state=tk.NORMAL if listening else tk.DISABLED)

    def _append_log(self, entry: LogEntry) -> None:
        self.log_text.configure(state=tk.NORMAL)
        self.log_text.insert(tk.END, f"{entry}\n")
        self.log_text.see(tk.END)
        self.log_text.configure(state=tk.DISABLED)

    def _export_logs(self) -> None:
        from tkinter import filedialog

        path = filedialog.asksaveasfilename(
            defaultextension=".txt",
            filetypes=[("Text files", "*.txt"), ("All files", "*.*")],
        )
        if not path:
            return
        if self.logger.export_logs_to_file(path):
            messagebox.showinfo("Export", "Log exported.")
        else:
            messagebox.showerror("Export", "Log could not be exported.")

    def _on_closing(self) -> None:
        if self.poll_job:
            self.root.after_cancel(self.poll_job)
            self.poll_job = None
        self.controller.shutdown()
        self.root.destroy()
