from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Iterable, List

from pydantic import TypeAdapter, ValidationError

from .errors import PersistenceError
from .models import MedicineRecord

logger = logging.getLogger(__name__)

_catalog_adapter = TypeAdapter(List[MedicineRecord])


class JsonCatalogGateway:
    """
    Loads and saves the medicine catalog as one JSON array.

    Every save rewrites the whole file; there is no append or journal format.
    """

    def __init__(self, path: str) -> None:
        # resolve relative paths against cwd once, like the server does at startup
        self.path = os.path.abspath(path)

    def load(self) -> List[MedicineRecord]:
        if not os.path.exists(self.path):
            logger.warning("[CATALOG] file not found yet: %s (starting empty)", self.path)
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"cannot read catalog {self.path}: {e}") from e

        try:
            records = _catalog_adapter.validate_python(raw)
        except ValidationError as e:
            raise PersistenceError(f"invalid catalog {self.path}: {e}") from e

        logger.info("[CATALOG] loaded %d medicines from %s", len(records), self.path)
        return records

    def save(self, records: Iterable[MedicineRecord]) -> None:
        data = [r.model_dump(mode="json") for r in records]
        folder = os.path.dirname(self.path)

        try:
            os.makedirs(folder, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".medicines-", suffix=".json", dir=folder)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise PersistenceError(f"cannot write catalog {self.path}: {e}") from e

        logger.debug("[CATALOG] saved %d medicines to %s", len(data), self.path)
