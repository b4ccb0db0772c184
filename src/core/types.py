"""Core data types and contracts for build info loading.

These types are shared by the parser, the retrieval sources and the loader.

Rules:
- metadata fields are always strings; absent values are "" and never None
- a LoadResult carries exactly one of metadata / failure
- types are JSON-serializable via to_dict()/from_dict()
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

UNAVAILABLE_ID = "UNAVAILABLE"

_FIELDS = ("id", "date", "bundle_version", "tag", "branch")


class LoadState(Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    ERROR = "error"
    LOADED = "loaded"

    @property
    def is_terminal(self) -> bool:
        return self in (LoadState.ERROR, LoadState.LOADED)


class FailureKind(Enum):
    MISSING_SOURCE = "missing_source"
    EMPTY_CONTENT = "empty_content"
    INSUFFICIENT_FIELDS = "insufficient_fields"
    FIELD_PARSE_FAILURE = "field_parse_failure"
    TRANSPORT_FAILURE = "transport_failure"
    PROTOCOL_FAILURE = "protocol_failure"
    UNEXPECTED_EXCEPTION = "unexpected_exception"


@dataclass(frozen=True)
class BuildMetadata:
    """Cached build descriptor fields."""

    id: str = ""
    date: str = ""
    bundle_version: str = ""
    tag: str = ""
    branch: str = ""

    def __post_init__(self) -> None:
        for name in _FIELDS:
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"BuildMetadata.{name} must be a string")

    @classmethod
    def unavailable(cls) -> "BuildMetadata":
        return cls(id=UNAVAILABLE_ID)

    def condensed(self) -> str:
        """Single-line summary: `<id> [branch] [version] [tag] @<date>`."""

        parts = [self.id]
        parts.extend(value for value in (self.branch, self.bundle_version, self.tag) if value)
        parts.append(f"@{self.date}")
        return " ".join(parts)

    def to_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in _FIELDS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildMetadata":
        return cls(**{name: str(data.get(name) or "") for name in _FIELDS})


@dataclass(frozen=True)
class LoadFailure:
    kind: FailureKind
    reason: str


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one retrieval: parsed metadata or a tagged failure."""

    metadata: BuildMetadata | None = None
    failure: LoadFailure | None = None

    def __post_init__(self) -> None:
        if (self.metadata is None) == (self.failure is None):
            raise ValueError("LoadResult requires exactly one of metadata or failure")

    @property
    def ok(self) -> bool:
        return self.metadata is not None

    @classmethod
    def success(cls, metadata: BuildMetadata) -> "LoadResult":
        return cls(metadata=metadata)

    @classmethod
    def failed(cls, kind: FailureKind, reason: str) -> "LoadResult":
        return cls(failure=LoadFailure(kind=kind, reason=reason))
