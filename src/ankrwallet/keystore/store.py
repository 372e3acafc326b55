from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from ..errors import ConfigError, DuplicateNameError, FormatError, NotFoundError
from ..utils import keystore_filename
from .codec import KeystoreRecord, decode, encode

logger = logging.getLogger(__name__)

KEYFILE_PREFIX = "UTC--"
TMP_SUFFIX = ".tmp"


@dataclass(frozen=True)
class KeystoreSummary:
    name: str
    address: str
    public_key: Optional[str] = None


@dataclass(frozen=True)
class KeystoreStore:
    """
    Directory-backed collection of keystore records keyed by name.

    One file per record, named ``UTC--<timestamp>--<address>``.  Every
    operation rescans the directory; there is no index.
    """

    root: Path

    def _ensure_root(self) -> Path:
        if self.root.exists() and not self.root.is_dir():
            raise ConfigError(f"Keystore home is not a directory: {self.root}")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Cannot create keystore home {self.root}: {exc}") from exc
        return self.root

    def _keyfiles(self) -> list[Path]:
        root = self._ensure_root()
        return sorted(
            path
            for path in root.iterdir()
            if path.name.startswith(KEYFILE_PREFIX)
            and not path.name.endswith(TMP_SUFFIX)
            and path.is_file()
        )

    def _records(self) -> Iterator[tuple[Path, KeystoreRecord]]:
        for path in self._keyfiles():
            try:
                record = decode(path.read_bytes())
            except FormatError as exc:
                raise FormatError(f"{path.name}: {exc}") from exc
            yield path, record

    def path_for(self, name: str) -> Path:
        for path, record in self._records():
            if record.name == name:
                return path
        raise NotFoundError(f"No keystore found with name '{name}'.")

    def create(self, name: str, record: KeystoreRecord) -> Path:
        """Persist a new record under ``name``.

        Raises:
            DuplicateNameError: If a record with the same name already exists
        """
        if record.name != name:
            record = record.renamed(name)
        for _, existing in self._records():
            if existing.name == name:
                raise DuplicateNameError(f"Key name '{name}' already exists.")

        target = self.root / keystore_filename(record.address)
        self._atomic_write(target, encode(record))
        logger.info("Created keystore %s for %s", target.name, name)
        return target

    def list(self) -> list[KeystoreSummary]:
        return [
            KeystoreSummary(name=record.name, address=record.address, public_key=record.public_key)
            for _, record in self._records()
        ]

    def find_by_name(self, name: str) -> KeystoreRecord:
        for _, record in self._records():
            if record.name == name:
                return record
        raise NotFoundError(f"No keystore found with name '{name}'.")

    def delete(self, name: str) -> Path:
        path = self.path_for(name)
        path.unlink()
        logger.info("Deleted keystore %s (%s)", path.name, name)
        return path

    def _atomic_write(self, path: Path, data: bytes) -> None:
        tmp = path.with_name(path.name + TMP_SUFFIX)
        try:
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            tmp.replace(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
