"""Build descriptor generation (producer side of the parser).

Writes `__buildInfo.txt` at build time:

    <build id>
    <file-time ticks of the build time>
    <bundle version>
    <escaped tag>
    <escaped branch>
"""

from __future__ import annotations

import getpass
import hashlib
import socket
import struct
from datetime import datetime, timezone
from pathlib import Path

from src.core.build_date import to_file_time
from src.core.escaping import escape
from src.observability.logger import get_logger

logger = get_logger("generator")

MIN_ID_LENGTH = 7
MAX_ID_LENGTH = 40


class BuildFileError(RuntimeError):
    """Raised when the descriptor file cannot be written."""


def _environment_identity() -> tuple[str, str]:
    try:
        host = socket.gethostname()
    except OSError:
        host = ""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = ""
    return host, user


def generate_build_id(
    build_time: datetime,
    tag: str = "",
    bundle_version: str = "",
    length: int = 10,
) -> str:
    """Uppercase SHA-1 hex over build time, tag, host, user and version.

    Truncated to `length` characters when 7 <= length < 40.
    """

    host, user = _environment_identity()
    hasher = hashlib.sha1()
    hasher.update(struct.pack("<q", to_file_time(build_time)))
    for value in (tag, host, user, bundle_version):
        encoded = value.encode("utf-8")
        hasher.update(struct.pack("<I", len(encoded)))
        hasher.update(encoded)

    build_id = hasher.hexdigest().upper()
    if MIN_ID_LENGTH <= length < MAX_ID_LENGTH:
        build_id = build_id[:length]
    return build_id


def render_build_file(
    build_id: str,
    build_time: datetime,
    bundle_version: str = "",
    tag: str = "",
    branch: str = "",
) -> str:
    lines = [build_id, str(to_file_time(build_time)), bundle_version, escape(tag)]
    if branch:
        lines.append(escape(branch))
    return "\n".join(lines)


def write_build_file(
    path: str | Path,
    *,
    bundle_version: str = "",
    tag: str = "",
    branch: str = "",
    build_time: datetime | None = None,
    id_length: int = 10,
) -> str:
    """Generate and write a descriptor; returns the written text."""

    build_time = build_time or datetime.now(timezone.utc)
    build_id = generate_build_id(build_time, tag=tag, bundle_version=bundle_version, length=id_length)
    contents = render_build_file(build_id, build_time, bundle_version, tag=tag, branch=branch)

    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(contents, encoding="utf-8", newline="\n")
    except OSError as e:
        raise BuildFileError(f"Failed to write build info to {target}: {e}") from e

    logger.info("Generated build data to '%s' (build=%s)", target, build_id)
    return contents
