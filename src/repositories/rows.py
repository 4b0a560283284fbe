from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def validate_rows(model: Type[M], rows: Iterable[Any], table: str) -> List[M]:
    """Validate backend rows, skipping (and logging) the ones that do not fit ``model``."""
    records: List[M] = []
    skipped = 0
    for row in rows:
        if not isinstance(row, dict):
            skipped += 1
            logger.debug("Skipping non-object %s row: %r", table, row)
            continue
        try:
            records.append(model.model_validate(row))
        except ValidationError as exc:
            skipped += 1
            logger.debug("Skipping %s row %s: %s", table, row.get("id"), exc)
    if skipped:
        logger.warning("Skipped %d malformed %s rows", skipped, table)
    return records


def map_rows(rows: Iterable[Any], mapper: Callable[[Dict[str, Any]], Dict[str, Any]]) -> List[Any]:
    """Apply ``mapper`` to object rows; anything else is left for ``validate_rows`` to skip."""
    return [mapper(row) if isinstance(row, dict) else row for row in rows]
