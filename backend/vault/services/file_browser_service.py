# Overview: Mocked file browser for the developer console; live entries only for backup snapshots.

from __future__ import annotations

from datetime import datetime, timezone

from . import backup_service


SECTIONS = ("application", "database", "config")

APPLICATION_FILES = [
    {"name": "__init__.py", "type": "file", "size": "4KB", "last_modified": "2026-06-10"},
    {"name": "storage.py", "type": "file", "size": "16KB", "last_modified": "2026-06-14"},
    {"name": "validation.py", "type": "file", "size": "9KB", "last_modified": "2026-06-12"},
    {"name": "decorators.py", "type": "file", "size": "3KB", "last_modified": "2026-06-12"},
    {"name": "routes", "type": "folder", "items": 9, "last_modified": "2026-06-15"},
    {"name": "services", "type": "folder", "items": 8, "last_modified": "2026-06-15"},
    {"name": "models", "type": "folder", "items": 5, "last_modified": "2026-06-08"},
]

DATABASE_FILES = [
    {"name": "models", "type": "folder", "items": 5, "last_modified": "2026-06-12"},
    {"name": "migrations", "type": "folder", "items": 1, "last_modified": "2026-06-14"},
]

CONFIG_FILES = [
    {"name": "pyproject.toml", "type": "file", "size": "2KB", "last_modified": "2026-06-01"},
    {"name": "alembic.ini", "type": "file", "size": "1KB", "last_modified": "2026-06-01"},
    {"name": "config.py", "type": "file", "size": "2KB", "last_modified": "2026-06-10"},
    {"name": ".env.example", "type": "file", "size": "1KB", "last_modified": "2026-06-05"},
]


class UnknownSectionError(ValueError):
    pass


def _format_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.1f}MB"
    if size >= 1024:
        return f"{round(size / 1024)}KB"
    return f"{size}B"


def _snapshot_entries() -> list[dict]:
    entries = []
    for snap in backup_service.describe_backups():
        modified = datetime.fromtimestamp(snap["modified"], tz=timezone.utc)
        entries.append({
            "name": snap["name"],
            "type": "file",
            "size": _format_size(snap["size"]),
            "last_modified": modified.strftime("%Y-%m-%d"),
        })
    return entries


def list_files(section: str = "application", search: str | None = None) -> list[dict]:
    """
    Entries for one section, optionally filtered by a case-insensitive
    substring of the name. Ids are positions within the section (1-based).
    """
    if section == "application":
        entries = list(APPLICATION_FILES)
    elif section == "database":
        entries = DATABASE_FILES + _snapshot_entries()
    elif section == "config":
        entries = list(CONFIG_FILES)
    else:
        raise UnknownSectionError(f"Unknown section: {section}")

    items = [{"id": i, **entry} for i, entry in enumerate(entries, start=1)]

    if search:
        needle = search.lower()
        items = [item for item in items if needle in item["name"].lower()]

    return items
