"""Fixed source: resolves immediately from locally known values.

Used in development/editor environments where no descriptor file exists.
Values come from `settings.fixed`; anything that cannot be introspected is
left as an empty string.
"""

from __future__ import annotations

from datetime import datetime
from importlib import metadata as importlib_metadata
from typing import Any

from src.core.build_date import format_build_date
from src.core.types import BuildMetadata, LoadResult
from src.libs.source.base_source import BaseSource, CompletionHandler

# Captured at import time; stands in for the process start time.
PROCESS_STARTED_AT = datetime.now()


class FixedSource(BaseSource):
    DEFAULT_ID = "EDITOR"

    def __init__(self, settings: Any, *, started_at: datetime | None = None, **kwargs: Any) -> None:
        super().__init__(settings, **kwargs)

        fixed = getattr(settings, "fixed", None)
        self.build_id = str(getattr(fixed, "id", None) or self.DEFAULT_ID)
        self.bundle_version = str(getattr(fixed, "bundle_version", None) or "")
        self.distribution = getattr(fixed, "distribution", None)
        self.include_start_time = bool(getattr(fixed, "include_start_time", True))
        self.started_at = started_at or PROCESS_STARTED_AT

    @property
    def location(self) -> str:
        return "<fixed>"

    def retrieve(self, on_complete: CompletionHandler) -> None:
        on_complete(LoadResult.success(self.build_metadata()))

    def build_metadata(self) -> BuildMetadata:
        return BuildMetadata(
            id=self.build_id,
            date=format_build_date(self.started_at) if self.include_start_time else "",
            bundle_version=self.bundle_version or self._installed_version(),
            tag="",
            branch="",
        )

    def _installed_version(self) -> str:
        if not self.distribution:
            return ""
        try:
            return importlib_metadata.version(self.distribution)
        except importlib_metadata.PackageNotFoundError:
            return ""
