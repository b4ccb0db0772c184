"""
Core Layer - build info loading.

This package contains:
- Configuration management (settings.py)
- Core data types (types.py) - shared contracts for parser, sources and loader
- Descriptor parsing and generation
- The loader state machine (loader.py)
"""

from src.core.types import (
    UNAVAILABLE_ID,
    BuildMetadata,
    FailureKind,
    LoadFailure,
    LoadResult,
    LoadState,
)

__all__ = [
    "UNAVAILABLE_ID",
    "BuildMetadata",
    "FailureKind",
    "LoadFailure",
    "LoadResult",
    "LoadState",
]
