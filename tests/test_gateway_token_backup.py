"""
Script: tests/test_gateway_token_backup.py
What: Tests local gateway token backups.
Doing: Writes backups into temp dirs and checks names, content, permissions, and pruning.
Goal: Keep a recoverable, owner-only trail of synced tokens.
"""

from __future__ import annotations

import os
import stat
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from apim_eks.common import ApimEksError
from apim_eks.gateway_token_backup import (
    backup_file_name,
    create_backup,
    latest_backup,
    prune_backups,
    render_backup,
)

DETAILS = {"Gateway ID": "gw-1", "EKS Cluster": "prod"}


class GatewayTokenBackupTests(unittest.TestCase):
    def test_backup_file_name(self) -> None:
        self.assertEqual(backup_file_name(datetime(2026, 5, 4, 3, 2, 1)), "token-backup-20260504-030201.txt")

    def test_render_backup_lists_details_then_token(self) -> None:
        text = render_backup("tok", DETAILS, datetime(2026, 5, 4, 3, 2, 1))
        self.assertEqual(
            text.splitlines(),
            ["Timestamp: 2026-05-04 03:02:01", "Gateway ID: gw-1", "EKS Cluster: prod", "Token: tok"],
        )

    def test_create_backup_is_owner_only(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = create_backup("tok", DETAILS, Path(tmp) / "backups", now=datetime(2026, 5, 4, 3, 2, 1))
            mode = stat.S_IMODE(path.stat().st_mode)
            self.assertEqual(mode, 0o600)
            self.assertIn("Token: tok", path.read_text(encoding="utf-8"))

    def test_prune_keeps_newest(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            directory = Path(tmp)
            for index in range(5):
                path = directory / f"token-backup-2026010{index}-000000.txt"
                path.write_text("x", encoding="utf-8")
                os.utime(path, (1_700_000_000 + index, 1_700_000_000 + index))
            (directory / "unrelated.txt").write_text("keep", encoding="utf-8")

            deleted = prune_backups(directory, 2)

            self.assertEqual(len(deleted), 3)
            remaining = sorted(p.name for p in directory.iterdir())
            self.assertEqual(
                remaining,
                ["token-backup-20260103-000000.txt", "token-backup-20260104-000000.txt", "unrelated.txt"],
            )
            self.assertEqual(latest_backup(directory).name, "token-backup-20260104-000000.txt")

    def test_unwritable_backup_dir_raises_tool_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "file"
            blocker.write_text("", encoding="utf-8")
            with self.assertRaisesRegex(ApimEksError, "Failed to create token backup"):
                create_backup("t" * 40, DETAILS, blocker / "backups", now=datetime(2026, 1, 1))

    def test_latest_backup_missing_dir(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(latest_backup(Path(tmp) / "absent"))


if __name__ == "__main__":
    unittest.main()
