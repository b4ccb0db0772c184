"""Application entrypoint.

`show` loads the build descriptor through the configured source and prints
the condensed summary; `generate` writes a fresh descriptor to the
configured file location.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from src.core.generator import BuildFileError, write_build_file
from src.core.loader import BuildInfoLoader
from src.core.settings import SettingsError, load_settings
from src.observability.logger import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Load or generate build information")
    parser.add_argument("--settings", default="config/settings.yaml", help="Settings file path")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("show", help="Print the loaded build information")

    generate = commands.add_parser("generate", help="Write a build info descriptor")
    generate.add_argument("--bundle-version", default="", help="Bundle version string")
    generate.add_argument("--tag", default="", help="Free-form build tag")
    generate.add_argument("--branch", default="", help="Source branch name")
    generate.add_argument("--id-length", type=int, default=10, help="Build id length (7-40)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except SettingsError as e:
        configure_logging(None).error(str(e))
        return 1

    logger = configure_logging(settings)

    if args.command == "generate":
        path = Path(settings.build_info.base_dir) / settings.build_info.filename
        try:
            write_build_file(
                path,
                bundle_version=args.bundle_version,
                tag=args.tag,
                branch=args.branch,
                id_length=args.id_length,
            )
        except BuildFileError as e:
            logger.error(str(e))
            return 1
        return 0

    loader = BuildInfoLoader.from_settings(settings)
    available = loader.when_loaded().result()
    print(loader.condensed())
    return 0 if available else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
