from __future__ import annotations

import fcntl
import glob
import hashlib
import json
import logging
import os
import shutil
import stat
import tempfile
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from ..constants import ENROLLMENT_BACKUPS_KEPT
from ..errors.internal import ParsingError, PersistenceError
from .models import EnrolledUser


class EnrollmentRepository:
    """File storage for the channel → enrolled operators mapping.

    The file is JSON, ``{"channels": {"#chan": [{"nick", "ident", "host"}]}}``.
    Writes are atomic (temp file, fsync, replace) under an exclusive lock and
    keep a few rotating backups of the previous file.
    """

    def __init__(self, path: str | os.PathLike[str]):
        if not isinstance(path, str | os.PathLike):
            raise TypeError("path must be str or os.PathLike")
        self.path = str(path)
        self._last_checksum: str | None = None

    def load(self) -> dict[str, list[EnrolledUser]]:
        """Read all enrollment records.

        A missing file means nothing is enrolled yet. Malformed user entries
        are skipped with a warning; an unreadable file raises.

        Raises:
            ParsingError: If the file is not valid JSON or has the wrong shape.
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except ValueError as e:
            raise ParsingError(
                f"Enrollment file {self.path} is not valid JSON: {e}"
            ) from e
        except OSError as e:
            raise ParsingError(f"Enrollment file {self.path} unreadable: {e}") from e

        if isinstance(data, dict) and isinstance(data.get("channels"), dict):
            raw_channels = data["channels"]
        elif isinstance(data, dict) and "channels" not in data:
            # Bare {"#chan": [...]} mapping
            raw_channels = data
        else:
            raise ParsingError(f"Enrollment file {self.path} has an unexpected layout")

        records = self._decode_channels(raw_channels)
        self._last_checksum = self._compute_checksum(records)
        return records

    def _decode_channels(
        self, raw_channels: Mapping[str, Any]
    ) -> dict[str, list[EnrolledUser]]:
        records: dict[str, list[EnrolledUser]] = {}
        for channel, raw_users in raw_channels.items():
            if not isinstance(raw_users, list):
                logging.warning(f"⚠️ Skipping enrollment for {channel}: not a list")
                continue
            users: list[EnrolledUser] = []
            for raw in raw_users:
                if not isinstance(raw, dict):
                    logging.warning(f"⚠️ Skipping malformed op entry in {channel}")
                    continue
                try:
                    users.append(EnrolledUser.from_dict(raw))
                except ParsingError as e:
                    logging.warning(f"⚠️ Skipping op entry in {channel}: {e}")
            records[channel] = users
        return records

    @staticmethod
    def _encode(records: Mapping[str, Sequence[EnrolledUser]]) -> dict[str, Any]:
        return {
            "channels": {
                channel: [user.to_dict() for user in users]
                for channel, users in records.items()
            }
        }

    def _compute_checksum(self, records: Mapping[str, Sequence[EnrolledUser]]) -> str:
        """Compute SHA256 checksum of the encoded records."""
        h = hashlib.sha256()
        payload = json.dumps(
            self._encode(records), sort_keys=True, separators=(",", ":")
        ).encode()
        h.update(payload)
        return h.hexdigest()

    def save(self, records: Mapping[str, Sequence[EnrolledUser]]) -> bool:
        """Write all enrollment records.

        Returns:
            True if the file was written, False if skipped due to no changes.

        Raises:
            PersistenceError: If the atomic write failed; the previous file is intact.
        """
        checksum = self._compute_checksum(records)
        if self._last_checksum == checksum:
            logging.debug(f"Skipped enrollment save (checksum match) channels={len(records)}")
            return False

        self._prepare_dir()
        try:
            self._atomic_write(self._encode(records))
        except (OSError, ValueError) as e:
            raise PersistenceError(
                f"Could not write enrollment file {self.path}: {e}"
            ) from e
        self._last_checksum = checksum
        return True

    def _prepare_dir(self) -> None:
        """Create the enrollment directory if it doesn't exist."""
        directory = os.path.dirname(self.path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)
            try:
                if stat.S_IMODE(os.lstat(directory).st_mode) != 0o755:
                    os.chmod(directory, 0o755)
            except (PermissionError, FileNotFoundError):
                pass

    def _atomic_write(self, data: dict[str, Any]) -> None:
        """Write ``data`` so readers see either the old or the new file."""
        target = Path(self.path)
        lock_path = target.with_suffix(target.suffix + ".lock")
        temp_path: str | None = None
        try:
            with open(lock_path, "w", encoding="utf-8") as lock_file:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
                self._create_backup(target)
                with tempfile.NamedTemporaryFile(
                    mode="w",
                    dir=target.parent,
                    prefix=f".{target.name}.",
                    suffix=".tmp",
                    delete=False,
                    encoding="utf-8",
                ) as tmp:
                    temp_path = tmp.name
                    json.dump(data, tmp, indent=2)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                os.chmod(temp_path, 0o600)
                os.replace(temp_path, self.path)
                temp_path = None
                logging.info("💾 Enrollments saved atomically")
        except (OSError, ValueError) as e:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
            logging.error(f"💥 Atomic enrollment save failed: {type(e).__name__}")
            raise
        finally:
            try:
                os.unlink(lock_path)
            except OSError:
                pass

    def _create_backup(self, target: Path) -> None:
        """Copy the current file aside, keeping the newest few copies."""
        if not (target.exists() and target.is_file()):
            return
        try:  # pragma: no cover - filesystem timing nuances
            backup_name = target.parent / f"{target.name}.bak.{int(time.time())}"
            shutil.copy2(target, backup_name)
            logging.debug("🗄️ Enrollment backup created")
            backups = sorted(
                glob.glob(str(target.parent / f"{target.name}.bak.*")),
                reverse=True,
            )
            for old in backups[ENROLLMENT_BACKUPS_KEPT:]:
                try:
                    os.unlink(old)
                except OSError:
                    pass
        except (OSError, ValueError) as e:
            logging.debug(f"💥 Enrollment backup failed: {str(e)}")
