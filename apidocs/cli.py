"""Command line entry point for the reference documentation generator."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from apidocs.api.loader import ModelLoadError
from apidocs.config.settings import ConfigurationError, load_settings
from apidocs.errors import ApiDocsError
from apidocs.generators.writer import WRITERS, UnsupportedFormatError, generate_files

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apidocs-gen",
        description="Generate API reference documentation",
    )
    parser.add_argument(
        "-f",
        "--format",
        default="markdown",
        help="format for output, one of 'markdown', 'html' and 'tex'",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        help="Directory holding the model, static sections and output "
        "(default: $APIDOCS_CONFIG_DIR or the current directory)",
    )
    parser.add_argument("--config", type=str, help="Path to a settings YAML file")
    parser.add_argument("--model", type=str, help="Path to the API model file")
    parser.add_argument(
        "--build-ops",
        action="store_true",
        default=None,
        help="Document the HTTP operations of each resource",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--list-formats",
        action="store_true",
        help="List the supported output formats and exit",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.list_formats:
        for name in WRITERS:
            print(name)
        return 0

    if args.format not in WRITERS:
        print(
            f"unsupported format '{args.format}' specified. "
            f"Valid formats: {', '.join(WRITERS)}",
            file=sys.stderr,
        )
        return EXIT_USAGE

    try:
        settings = load_settings(
            config_dir=Path(args.config_dir).expanduser() if args.config_dir else None,
            config_path=Path(args.config).expanduser() if args.config else None,
            model_file=Path(args.model).expanduser() if args.model else None,
            build_operations=args.build_ops,
        )
        writer = generate_files(args.format, settings)
    except UnsupportedFormatError as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE
    except (ConfigurationError, ModelLoadError) as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except (ApiDocsError, OSError) as e:
        logger.error(f"Generation failed: {e}")
        return EXIT_FAILURE

    sections = len(writer.toc.sections)
    print(f"Wrote {args.format} documentation ({sections} sections) to {settings.build_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
