"""CLI entrypoints for portgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .errors import PortgenError, TranslationError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write debug-level logs to this file.",
    )


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the Elm project root holding .portgen.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--descriptor",
        default=None,
        help="Read the module descriptor from this JSON file instead of running the extractor.",
    )
    parser.add_argument(
        "--module",
        default=None,
        help="Elm module name to generate for (overrides the name reported by the extractor).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portgen",
        description="Generate TypeScript declarations for the ports of an Elm module.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Write <source_root>/<Module>/index.d.ts for the configured module.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_log_file_option(generate_parser, suppress_default=True)
    _add_source_options(generate_parser)
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the diff against the current declaration file without writing it.",
    )

    show_parser = subparsers.add_parser(
        "show",
        help="Print the generated declarations to stdout.",
    )
    _add_verbose_option(show_parser, suppress_default=True)
    _add_log_file_option(show_parser, suppress_default=True)
    _add_source_options(show_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing declaration generation.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_log_file_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for portgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    verbose = bool(args.verbose)
    log_file = Path(args.log_file).expanduser() if args.log_file else None
    configure_logging(
        verbose=verbose,
        quiet=args.command == "show" and not verbose,
        log_file=log_file,
    )

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    orchestrator = Orchestrator()

    if args.command == "generate":
        dry_run = bool(getattr(args, "dry_run", False))
        try:
            result = orchestrator.run_generate(
                args.path,
                descriptor_path=args.descriptor,
                module=args.module,
                dry_run=dry_run,
            )
        except TranslationError as exc:
            parser.exit(1, f"portgen generate failed at {exc.location}: {exc.detail}\n")
        except PortgenError as exc:
            parser.exit(1, f"portgen generate failed: {exc}\nRun with --verbose for more details.\n")
        except OSError as exc:
            parser.exit(1, f"portgen generate could not write declarations: {exc}\n")
        except Exception as exc:  # pragma: no cover - unexpected failure
            _log_unexpected(verbose, "generate")
            parser.exit(1, f"portgen generate failed: {exc}\nRun with --verbose for more details.\n")
        rel_path = _relativize(result.path)
        if dry_run:
            if result.changed:
                print(f"Declaration changes for {rel_path} (dry-run):")
                print(result.diff, end="")
            else:
                print(f"{rel_path} already up to date (dry-run)")
        elif result.changed:
            print(f"Declarations written to {rel_path}")
        else:
            print(f"{rel_path} already up to date")
    elif args.command == "show":
        try:
            content = orchestrator.run_show(
                args.path,
                descriptor_path=args.descriptor,
                module=args.module,
            )
        except TranslationError as exc:
            parser.exit(1, f"portgen show failed at {exc.location}: {exc.detail}\n")
        except PortgenError as exc:
            parser.exit(1, f"portgen show failed: {exc}\nRun with --verbose for more details.\n")
        except Exception as exc:  # pragma: no cover - unexpected failure
            _log_unexpected(verbose, "show")
            parser.exit(1, f"portgen show failed: {exc}\nRun with --verbose for more details.\n")
        sys.stdout.write(content)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _log_unexpected(verbose: bool, command: str) -> None:
    if verbose:
        get_logger("cli").exception("Unexpected failure during portgen %s", command)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
