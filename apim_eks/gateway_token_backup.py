"""
Script: apim_eks/gateway_token_backup.py
What: Keeps local backups of synced gateway tokens.
Doing: Writes one 0600 text file per sync and prunes all but the newest `MAX_BACKUPS`.
Goal: Allow manual recovery if APIM and the cluster secret both go bad.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Mapping

from apim_eks.common import ApimEksError

logger = logging.getLogger(__name__)

BACKUP_GLOB = "token-backup-*.txt"
DEFAULT_BACKUP_DIR = "/var/apim-backup"
DEFAULT_MAX_BACKUPS = 10


def backup_file_name(now: datetime) -> str:
    return f"token-backup-{now:%Y%m%d-%H%M%S}.txt"


def render_backup(token: str, details: Mapping[str, str], now: datetime) -> str:
    lines = [f"Timestamp: {now:%Y-%m-%d %H:%M:%S}"]
    lines.extend(f"{label}: {value}" for label, value in details.items())
    lines.append(f"Token: {token}")
    return "\n".join(lines) + "\n"


def list_backups(backup_dir: Path) -> list[Path]:
    """Backups newest first (by mtime, then name)."""
    if not backup_dir.is_dir():
        return []
    files = [path for path in backup_dir.glob(BACKUP_GLOB) if path.is_file()]
    return sorted(files, key=lambda path: (path.stat().st_mtime, path.name), reverse=True)


def latest_backup(backup_dir: Path) -> Path | None:
    backups = list_backups(backup_dir)
    return backups[0] if backups else None


def prune_backups(backup_dir: Path, keep: int) -> list[Path]:
    """Delete all but the newest `keep` backups. Returns deleted paths."""
    stale = list_backups(backup_dir)[max(keep, 0):]
    if stale:
        logger.info("Cleaning old backups (keeping last %s)...", keep)
    for path in stale:
        path.unlink()
    return stale


def create_backup(
    token: str,
    details: Mapping[str, str],
    backup_dir: Path,
    *,
    max_backups: int = DEFAULT_MAX_BACKUPS,
    now: datetime | None = None,
) -> Path:
    logger.info("Creating token backup...")
    stamp = now or datetime.now()
    backup_file = backup_dir / backup_file_name(stamp)
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        # Create with owner-only permissions before the token is written.
        fd = os.open(backup_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(render_backup(token, details, stamp))
        os.chmod(backup_file, 0o600)
    except OSError as exc:
        raise ApimEksError(f"Failed to create token backup in {backup_dir}\n{exc}") from exc

    prune_backups(backup_dir, max_backups)
    logger.info("✅ Backup created: %s", backup_file)
    return backup_file
