from __future__ import annotations

import logging
from typing import Callable, List, TypeVar

import httpx


logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_or_empty(loader: Callable[[], List[T]], label: str) -> List[T]:
    """Run a repository read, falling back to an empty list when the backend is unreachable."""
    try:
        return loader()
    except httpx.HTTPError as exc:
        logger.warning("Could not load %s, continuing with an empty set: %s", label, exc)
        return []
