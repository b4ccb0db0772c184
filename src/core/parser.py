"""Build descriptor text parser.

Descriptor layout (newline separated, UTF-8):

    line0: build id
    line1: file-time ticks
    line2: bundle version
    line3: tag (escaped, optional)
    line4: branch (escaped, optional)

`parse_build_info` never raises; every failure is reported as a
`LoadResult` carrying a `LoadFailure`.
"""

from __future__ import annotations

import re

from src.core.build_date import format_build_date, from_file_time
from src.core.escaping import unescape
from src.core.types import BuildMetadata, FailureKind, LoadResult

MIN_FIELDS = 3

# Signed 64-bit tick count, ASCII digits only.
_TICKS_PATTERN = re.compile(r"-?[0-9]+")
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def parse_build_info(text: str | None) -> LoadResult:
    """Parse descriptor text into build metadata."""

    if not text:
        return LoadResult.failed(FailureKind.EMPTY_CONTENT, "empty content")

    try:
        lines = text.split("\n")
        if len(lines) < MIN_FIELDS:
            return LoadResult.failed(FailureKind.INSUFFICIENT_FIELDS, "insufficient fields")

        try:
            build_date = format_build_date(from_file_time(_parse_ticks(lines[1])))
        except (ValueError, OverflowError) as error:
            return LoadResult.failed(FailureKind.FIELD_PARSE_FAILURE, f"exception: {error}")

        metadata = BuildMetadata(
            id=lines[0],
            date=build_date,
            bundle_version=lines[2],
            tag=unescape(lines[3]) if len(lines) > 3 else "",
            branch=unescape(lines[4]) if len(lines) > 4 else "",
        )
    except Exception as error:  # noqa: BLE001 - every failure becomes a LoadResult
        return LoadResult.failed(FailureKind.UNEXPECTED_EXCEPTION, f"exception: {error}")

    return LoadResult.success(metadata)


def _parse_ticks(field: str) -> int:
    if not _TICKS_PATTERN.fullmatch(field):
        raise ValueError(f"invalid tick count {field!r}")
    ticks = int(field)
    if not INT64_MIN <= ticks <= INT64_MAX:
        raise ValueError(f"tick count out of 64-bit range: {field}")
    return ticks
