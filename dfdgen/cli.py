"""CLI entrypoints for dfdgen commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

import yaml

from .config import OUTPUT_FORMATS, ConfigError, DFDGenConfig, load_config
from .loader import ExtractionError, load_document
from .logging import configure_logging
from .models import AnalysisResult, NotAnalyzable
from .pipeline import DFDPipeline

EXIT_NOT_ANALYZABLE = 2


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    default = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only log warnings and errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dfdgen",
        description="Build data-flow diagrams from React, Vue and Svelte component analyses.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Build the DFD for one component analysis document.",
    )
    _add_logging_options(analyze_parser, suppress_default=True)
    analyze_parser.add_argument("document", help="Path to a JSON or YAML analysis document.")
    analyze_parser.add_argument(
        "--source",
        help="Component source file scanned for atom definitions.",
    )
    analyze_parser.add_argument(
        "--config",
        help="Path to .dfdgen.yml or the directory holding it (defaults to the document's directory).",
    )
    analyze_parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        help="Output format (overrides output.format from the config).",
    )
    analyze_parser.add_argument("--output", "-o", help="Write the result to this file.")

    processors_parser = subparsers.add_parser(
        "processors",
        help="List processors in dispatch order.",
    )
    _add_logging_options(processors_parser, suppress_default=True)
    processors_parser.add_argument("--config", help="Path to .dfdgen.yml.")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_logging_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--config", help="Path to .dfdgen.yml.")

    return parser


def render_result(result: AnalysisResult, *, fmt: str = "json", indent: int = 2) -> str:
    """Serialise a graph or not-analyzable result."""
    payload: Dict[str, Any] = result.to_dict()
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, indent=max(indent, 2))
    return json.dumps(payload, indent=indent or None) + "\n"


def _load_config(parser: argparse.ArgumentParser, location: str | None, default: Path) -> DFDGenConfig:
    try:
        return load_config(Path(location) if location else default)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for dfdgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    if args.command == "analyze":
        document = Path(args.document)
        config = _load_config(parser, args.config, document.parent)
        pipeline = DFDPipeline(config)
        source = None
        if args.source:
            try:
                source = Path(args.source).read_text(encoding="utf-8")
            except OSError as exc:
                parser.exit(1, f"Cannot read source file: {exc}\n")
        try:
            analysis = load_document(document)
        except ExtractionError as exc:
            result: AnalysisResult = NotAnalyzable(
                reason=str(exc), component=exc.component, file_path=exc.file_path or str(document)
            )
        else:
            try:
                result = pipeline.run(analysis, source)
            except Exception as exc:  # pragma: no cover
                parser.exit(1, f"dfdgen analyze failed: {exc}\nRun with --verbose for more details.\n")
        fmt = args.format or config.output.format
        text = render_result(result, fmt=fmt, indent=config.output.indent)
        if args.output:
            Path(args.output).write_text(text, encoding="utf-8")
        else:
            sys.stdout.write(text)
        if isinstance(result, NotAnalyzable):
            parser.exit(EXIT_NOT_ANALYZABLE)
    elif args.command == "processors":
        config = _load_config(parser, args.config, Path.cwd())
        try:
            processors = DFDPipeline(config).processors()
        except (ValueError, RuntimeError) as exc:
            parser.exit(1, f"Cannot load processors: {exc}\n")
        for processor in processors:
            meta = processor.metadata
            print(f"{meta.id:<18} priority={meta.priority:<4} {meta.description}")
    elif args.command == "serve":
        from .service import run_service

        config = _load_config(parser, args.config, Path.cwd())
        try:
            run_service(host=args.host, port=args.port, config=config)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
