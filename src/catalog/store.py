"""Catalog document persistence: store interface + implementations.

- CatalogStore: abstract interface (read whole document / write whole document)
- JsonFileCatalogStore: the production backing file (``pricing-data.json``)
- InMemoryCatalogStore: for tests only

There is no partial update: callers read the whole document, mutate it in
memory and write the whole document back.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from src.catalog.errors import CatalogUnavailable


class CatalogStore(ABC):
    """Abstract interface for catalog document persistence."""

    @abstractmethod
    def read(self) -> dict[str, Any]:
        """Return the raw parsed document. Raises CatalogUnavailable."""

    @abstractmethod
    def write(self, document: dict[str, Any]) -> None:
        """Replace the stored document."""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable location, for logs and error messages."""


class JsonFileCatalogStore(CatalogStore):
    """Catalog stored as a single pretty-printed JSON file.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace`` so readers never see a half-written document.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def describe(self) -> str:
        return str(self._path)

    def read(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Pricing catalog unreadable at {self._path}: {exc}"
            raise CatalogUnavailable(msg) from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"Pricing catalog at {self._path} is not valid JSON: {exc}"
            raise CatalogUnavailable(msg) from exc
        if not isinstance(data, dict):
            msg = f"Pricing catalog at {self._path} must be a JSON object."
            raise CatalogUnavailable(msg)
        return data

    def write(self, document: dict[str, Any]) -> None:
        payload = json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False)
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{self._path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class InMemoryCatalogStore(CatalogStore):
    """In-memory catalog store for testing.

    NOT for production use. Counts writes so tests can assert that a
    read-only pass did not rewrite the document.
    """

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self._document = copy.deepcopy(document) if document is not None else None
        self.write_count = 0

    def describe(self) -> str:
        return "<memory>"

    def read(self) -> dict[str, Any]:
        if self._document is None:
            msg = "Pricing catalog not loaded into memory store."
            raise CatalogUnavailable(msg)
        return copy.deepcopy(self._document)

    def write(self, document: dict[str, Any]) -> None:
        self._document = copy.deepcopy(document)
        self.write_count += 1

    @property
    def document(self) -> dict[str, Any] | None:
        """Snapshot of the stored document."""
        return copy.deepcopy(self._document)
