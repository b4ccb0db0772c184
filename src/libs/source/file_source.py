"""Blocking source: reads the descriptor from the local file system."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from src.core.parser import parse_build_info
from src.core.settings import DEFAULT_FILENAME
from src.core.types import FailureKind, LoadResult
from src.libs.source.base_source import BaseSource, CompletionHandler


class FileSource(BaseSource):
    """Read `base_dir/filename` on the calling thread.

    Parameter precedence:
    1) explicit constructor arguments
    2) settings.build_info.*
    3) defaults
    """

    def __init__(
        self,
        settings: Any,
        *,
        base_dir: str | Path | None = None,
        filename: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(settings, **kwargs)

        build_settings = getattr(settings, "build_info", None)
        configured_dir = base_dir if base_dir is not None else getattr(build_settings, "base_dir", ".")
        configured_name = filename or getattr(build_settings, "filename", None) or DEFAULT_FILENAME
        self.path = Path(configured_dir) / configured_name

    @property
    def location(self) -> str:
        return str(self.path)

    def retrieve(self, on_complete: CompletionHandler) -> None:
        on_complete(self._read())

    def _read(self) -> LoadResult:
        if not self.path.is_file():
            return LoadResult.failed(FailureKind.MISSING_SOURCE, "missing source")

        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return LoadResult.failed(FailureKind.MISSING_SOURCE, "missing source")
        except (OSError, UnicodeDecodeError) as error:
            return LoadResult.failed(FailureKind.UNEXPECTED_EXCEPTION, f"read error: {error}")

        return parse_build_info(text)
