"""Command-line interface for texcompiler."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, TextIO

from texcompiler import __version__
from texcompiler.backends.registry import describe_backends, get_backend
from texcompiler.config import AppConfig, Mode, load_settings, resolve_backend_name
from texcompiler.dispatcher import (
    BuildOutcome,
    query_compiler_version,
    run_persistent,
    run_standalone,
)
from texcompiler.ipc import StdioTransport
from texcompiler.lifecycle import ExitCode, install_signal_handlers, run_supervised
from texcompiler.logging_utils import LogOptions, configure_logging

LOGGER = logging.getLogger("texcompiler.cli")

_EXIT_CODES = {
    BuildOutcome.SUCCEEDED: ExitCode.SUCCESS,
    BuildOutcome.FAILED: ExitCode.ERROR,
    BuildOutcome.INPUT_NOT_FOUND: ExitCode.FILE_NOT_FOUND,
}


def exit_code_for(outcome: BuildOutcome) -> ExitCode:
    """Map a stand-alone build outcome to the process exit code."""
    return _EXIT_CODES[outcome]


class _Parser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with the generic error code.

    Exit code 2 is reserved for a missing input file.
    """

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(ExitCode.ERROR, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for both execution modes."""
    parser = _Parser(
        prog="texcompiler",
        description="Texture compiler: build a pixel payload and metadata sidecar.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-P",
        "--persistent",
        action="store_true",
        help="Start in persistent mode (other build arguments are ignored).",
    )
    parser.add_argument(
        "--list-backends",
        action="store_true",
        help="List the available compile backends and their pixel formats, then exit.",
    )
    parser.add_argument("-i", "--input", default="", help="Specify the source file.")
    parser.add_argument("-o", "--output", default="", help="Specify the destination file.")
    parser.add_argument("-t", "--target", default="", help="Specify the build target platform.")
    parser.add_argument(
        "--backend",
        default=None,
        help="Compile backend name (default: raster, or TEXCOMPILER_BACKEND).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce log output to warnings and errors.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON on stderr.",
    )
    parser.add_argument(
        "--log-file",
        help="Optional path for JSON log output.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> AppConfig:
    """Freeze parsed arguments into the application configuration."""
    backend_name = resolve_backend_name(args.backend, load_settings())
    startup_directory = os.getcwd()
    if args.persistent:
        return AppConfig(
            mode=Mode.PERSISTENT,
            startup_directory=startup_directory,
            backend_name=backend_name,
        )
    return AppConfig(
        mode=Mode.STANDALONE,
        startup_directory=startup_directory,
        source_path=args.input or "",
        target_path=args.output or "",
        platform=args.target or "",
        backend_name=backend_name,
    )


def run(config: AppConfig) -> int:
    """Run the configured mode and return the process exit code."""
    backend = get_backend(config.backend_name)
    if config.persistent:
        LOGGER.info("Starting %s compiler v%s in persistent mode.", config.name, config.version)
        transport = StdioTransport(
            sys.stdin,
            sys.stdout,
            version_provider=query_compiler_version,
        )
        handled = run_persistent(transport.requests(), transport.send_result, backend=backend)
        LOGGER.info("Input stream closed after %s build(s).", handled)
        return ExitCode.SUCCESS
    outcome = run_standalone(config, backend=backend, err_stream=sys.stderr)
    return exit_code_for(outcome)


def print_backends(stream: TextIO) -> int:
    """Write one line per available backend: name, version and formats."""
    for name, spec in describe_backends():
        print(f"{name}\t{spec.version}\t{', '.join(spec.formats)}", file=stream)
    return ExitCode.SUCCESS


def _execute(args: argparse.Namespace) -> int:
    if args.list_backends:
        return print_backends(sys.stdout)
    return run(config_from_args(args))


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint and return an exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    log_file_value = getattr(args, "log_file", None)
    configure_logging(
        LogOptions(
            verbose=args.verbose or 0,
            quiet=bool(args.quiet),
            log_file=Path(log_file_value) if log_file_value else None,
            json_console=bool(args.log_json),
        )
    )
    install_signal_handlers()
    return run_supervised(lambda: _execute(args))


if __name__ == "__main__":
    raise SystemExit(main())
