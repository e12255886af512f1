# Overview: In-process timer that takes periodic snapshots and enforces retention.

from __future__ import annotations

import threading

from flask import Flask

from . import backup_service


class BackupScheduler:
    """
    Daemon thread: every interval_hours, create a snapshot then prune to the
    newest `keep` snapshots.

    A failing cycle is logged and the schedule continues. Nothing
    coordinates with an in-flight restore.
    """

    def __init__(self, app: Flask, interval_hours: float = 24, keep: int = backup_service.DEFAULT_RETENTION):
        self.app = app
        self.interval_seconds = interval_hours * 60 * 60
        self.keep = keep
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_cycle(self) -> tuple[str | None, list[str]]:
        """One scheduled cycle. Returns (snapshot_path, removed_names)."""
        with self.app.app_context():
            try:
                backup_path = backup_service.create_backup()
                self.app.logger.info("Automatic backup created: %s", backup_path)
                removed = backup_service.prune_backups(self.keep)
                return backup_path, removed
            except Exception:
                self.app.logger.exception("Error during scheduled backup")
                return None, []

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.run_cycle()

    def start(self) -> "BackupScheduler":
        if self._thread and self._thread.is_alive():
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="backup-scheduler", daemon=True)
        self._thread.start()
        self.app.logger.info(
            "Scheduling automatic backups every %s hours (keeping %d)",
            self.interval_seconds / 3600, self.keep,
        )
        return self

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())


def schedule_backups(app: Flask) -> BackupScheduler:
    scheduler = BackupScheduler(
        app,
        interval_hours=app.config.get("BACKUP_INTERVAL_HOURS", 24),
        keep=app.config.get("BACKUP_RETENTION", backup_service.DEFAULT_RETENTION),
    )
    app.extensions["vault.backup_scheduler"] = scheduler
    return scheduler.start()
