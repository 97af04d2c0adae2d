"""
Status Logger - tracks the status of the clicker session.

SRP: This class has one responsibility - logging and status management.
"""

import threading
from datetime import datetime
from typing import Callable, List
from dataclasses import dataclass


@dataclass
class LogEntry:
    """A single log entry."""
    timestamp: datetime
    message: str
    level: str = "INFO"

    def __str__(self) -> str:
        time_str = self.timestamp.strftime("%H:%M:%S")
        return f"[{time_str}] {self.level}: {self.message}"


class StatusLogger:
    """
    Keeps a bounded in-memory log and forwards new entries to listeners.

    Entries arrive from the click loop, the keyboard hook and the dispatch
    thread, so all access goes through one lock.
    """

    def __init__(self, max_entries: int = 200):
        """
        Initialize the logger.

        Args:
            max_entries: Maximum number of log entries to keep in memory
        """
        self._log_entries: List[LogEntry] = []
        self._max_entries = max_entries
        self._current_status = "Ready"
        self._listeners: List[Callable[[LogEntry], None]] = []
        self._lock = threading.Lock()

    def add_listener(self, listener: Callable[[LogEntry], None]) -> None:
        """Call ``listener`` with every entry added from now on."""
        with self._lock:
            self._listeners.append(listener)

    def log_info(self, message: str) -> None:
        self._add_entry(message, "INFO")

    def log_warning(self, message: str) -> None:
        self._add_entry(message, "WARNING")

    def log_error(self, message: str) -> None:
        self._add_entry(message, "ERROR")

    def update_status(self, status: str) -> None:
        """
        Update the current status.

        Args:
            status: The new status message
        """
        with self._lock:
            self._current_status = status
        self.log_info(status)

    def get_current_status(self) -> str:
        with self._lock:
            return self._current_status

    def get_recent_logs(self, count: int = 10) -> List[LogEntry]:
        """
        Get the most recent log entries.

        Args:
            count: Number of recent entries to return
        """
        with self._lock:
            return self._log_entries[-count:]

    def get_all_logs(self) -> List[LogEntry]:
        with self._lock:
            return list(self._log_entries)

    def clear_logs(self) -> None:
        with self._lock:
            self._log_entries.clear()

    def _add_entry(self, message: str, level: str) -> None:
        entry = LogEntry(timestamp=datetime.now(), message=message, level=level)

        with self._lock:
            self._log_entries.append(entry)
            if len(self._log_entries) > self._max_entries:
                self._log_entries = self._log_entries[-self._max_entries:]
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(entry)
            except Exception:
                # A broken view must not stop logging.
                pass

    def export_logs_to_file(self, filepath: str) -> bool:
        """
        Export all logs to a text file.

        Args:
            filepath: Path where the log file should be saved

        Returns:
            bool: True if export was successful
        """
        entries = self.get_all_logs()
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write("Hotkey Auto Clicker - Log Export\n")
                f.write(f"Generated: {datetime.now()}\n")
                f.write("=" * 50 + "\n\n")

                for entry in entries:
                    time_str = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                    f.write(f"[{time_str}] {entry.level}: {entry.message}\n")

            return True
        except OSError as e:
            self.log_error(f"Failed to export logs: {e}")
            return False
