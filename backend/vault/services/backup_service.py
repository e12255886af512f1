# Overview: JSON snapshot backup/restore of the portal tables, plus snapshot retention.

"""
Backup / Restore

Snapshot format: one JSON file per snapshot, {table_name: [row, ...]}, named
backup-<UTC timestamp with ':' and '.' replaced by '-'>.json so that
lexicographic order of filenames is chronological order.

No transaction wraps a restore: each table is cleared and each row inserted
with its own commit. A failure part-way through leaves the tables partially
restored.
"""

from __future__ import annotations

import json
import os
import re

from flask import current_app

from ..storage import BACKUP_TABLES, get_storage
from ..time_utils import snapshot_stamp


BACKUP_PREFIX = "backup-"
BACKUP_SUFFIX = ".json"
DEFAULT_RETENTION = 5

_BACKUP_NAME_RE = re.compile(r"^backup-[A-Za-z0-9\-]+\.json$")


class BackupError(Exception):
    """Backup, restore or snapshot lookup failed."""


class BackupNotFoundError(BackupError):
    """Snapshot file does not exist."""


class InvalidBackupNameError(BackupError):
    """Name is not a bare backup-*.json filename."""


def get_backup_dir() -> str:
    """Configured snapshot directory, created on demand."""
    backup_dir = current_app.config["BACKUP_DIR"]
    os.makedirs(backup_dir, exist_ok=True)
    return backup_dir


def backup_filename(stamp: str | None = None) -> str:
    return f"{BACKUP_PREFIX}{stamp or snapshot_stamp()}{BACKUP_SUFFIX}"


def create_backup() -> str:
    """
    Dump every table into a new snapshot file.

    Returns the snapshot path. Any failure is logged and re-raised as
    BackupError; the first failing table aborts the whole backup.
    """
    try:
        storage = get_storage()
        backup_path = os.path.join(get_backup_dir(), backup_filename())

        backup: dict[str, list[dict]] = {}
        for table in BACKUP_TABLES:
            backup[table] = storage.dump_table(table)

        with open(backup_path, "w", encoding="utf-8") as fh:
            json.dump(backup, fh, indent=2)

        current_app.logger.info("Backup created: %s", backup_path)
        return backup_path
    except Exception as exc:
        current_app.logger.exception("Error creating backup")
        raise BackupError(f"Failed to create backup: {exc}") from exc


def restore_from_backup(backup_path: str) -> dict[str, int]:
    """
    Replace table contents with the rows in a snapshot.

    Every table present in the snapshot is cleared (children first) and then
    refilled row by row (parents first). Tables missing from the snapshot are
    left untouched.

    Returns {table: rows_restored}.

    Raises:
        BackupNotFoundError: snapshot file missing
        BackupError: unreadable snapshot or failure while restoring
    """
    if not os.path.exists(backup_path):
        raise BackupNotFoundError(f"Backup file not found: {os.path.basename(backup_path)}")

    try:
        with open(backup_path, "r", encoding="utf-8") as fh:
            backup_data = json.load(fh)
        if not isinstance(backup_data, dict):
            raise ValueError("snapshot root must be an object")

        storage = get_storage()
        tables = [t for t in BACKUP_TABLES if isinstance(backup_data.get(t), list)]

        for table in reversed(tables):
            storage.clear_table(table)

        restored: dict[str, int] = {}
        for table in tables:
            for record in backup_data[table]:
                storage.insert_row(table, record)
            storage.reset_sequence(table)
            restored[table] = len(backup_data[table])

        current_app.logger.info("Restored from backup %s: %s", os.path.basename(backup_path), restored)
        return restored
    except Exception as exc:
        current_app.logger.exception("Error restoring from backup")
        raise BackupError(f"Failed to restore from backup: {exc}") from exc


def get_available_backups() -> list[str]:
    """Snapshot filenames, newest first."""
    backup_dir = current_app.config["BACKUP_DIR"]
    if not os.path.isdir(backup_dir):
        return []

    return sorted(
        (f for f in os.listdir(backup_dir) if f.startswith(BACKUP_PREFIX) and f.endswith(BACKUP_SUFFIX)),
        reverse=True,
    )


def resolve_backup_path(name: str) -> str:
    """
    Map a client-supplied snapshot name to a path inside the backup dir.

    Only bare names like backup-2026-10-19T08-55-00-123Z.json are accepted.
    """
    if not isinstance(name, str) or not _BACKUP_NAME_RE.match(name):
        raise InvalidBackupNameError("Invalid backup file name")
    return os.path.join(current_app.config["BACKUP_DIR"], name)


def prune_backups(keep: int = DEFAULT_RETENTION) -> list[str]:
    """Delete all but the newest `keep` snapshots. Returns deleted names."""
    if keep < 0:
        raise ValueError(f"keep must be >= 0, got {keep}")
    backup_dir = current_app.config["BACKUP_DIR"]
    removed = []
    for name in get_available_backups()[keep:]:
        os.remove(os.path.join(backup_dir, name))
        current_app.logger.info("Removed old backup: %s", name)
        removed.append(name)
    return removed


def describe_backups() -> list[dict]:
    """Snapshot name, size in bytes and mtime (epoch seconds), newest first."""
    backup_dir = current_app.config["BACKUP_DIR"]
    items = []
    for name in get_available_backups():
        stat = os.stat(os.path.join(backup_dir, name))
        items.append({"name": name, "size": stat.st_size, "modified": stat.st_mtime})
    return items
