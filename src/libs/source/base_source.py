"""Base contract for build descriptor sources.

A source obtains the raw descriptor from one place (local file, HTTP, fixed
environment values) and reports exactly one `LoadResult` through the
completion callback. Sources never raise out of `retrieve`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from src.core.types import LoadResult

CompletionHandler = Callable[[LoadResult], None]


class BaseSource(ABC):
    """Abstract retrieval strategy."""

    def __init__(self, settings: Any, **_: Any) -> None:
        self.settings = settings

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable source location used in failure logs."""

    @abstractmethod
    def retrieve(self, on_complete: CompletionHandler) -> None:
        """Start retrieval; `on_complete` is called once, now or later."""
