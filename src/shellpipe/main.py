"""Command-line entry point for shellpipe."""

import argparse
import asyncio
import logging
import signal
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console

from shellpipe.config.settings import get_settings
from shellpipe.output.render import EXIT_FAILURE, render_pipeline_result
from shellpipe.output.writer import OutputWriter
from shellpipe.pipeline.executor import PipelineExecutor
from shellpipe.pipeline.models import (
    CommandOutcome,
    ParsedPipeline,
    PipelineExecutionResult,
)
from shellpipe.runtime.process_executor import ExternalProcessExecutor

EMIT_COMMAND = "emit"
STDIN_MARKER = "-"


def setup_logging() -> None:
    """Configure logging from settings: a file when configured, else stderr."""
    settings = get_settings()
    handler: logging.Handler
    if settings.log_file:
        handler = logging.FileHandler(settings.log_file, mode="w")
    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[handler],
    )
    logging.debug("shellpipe starting with %s", settings)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        description="shellpipe - pipe text through external commands"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run",
        help="Emit text and pipe it through one or more external commands",
    )
    run_parser.add_argument(
        "external",
        nargs="+",
        metavar="COMMAND",
        help="External command; give several to chain them (e.g. 'grep x' 'head -2')",
    )
    run_parser.add_argument(
        "--input",
        "-i",
        default=STDIN_MARKER,
        help="File whose content is piped (default: read standard input)",
    )
    run_parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Do not warn about nonzero exit codes",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


async def emit_command(
    command_text: str, writer: OutputWriter, cancel_event: asyncio.Event
) -> CommandOutcome:
    """Internal command: write a file's (or stdin's) content to ``writer``."""
    _, _, source = command_text.partition(" ")
    source = source.strip() or STDIN_MARKER
    if cancel_event.is_set():
        raise asyncio.CancelledError()

    try:
        if source == STDIN_MARKER:
            text = await asyncio.to_thread(sys.stdin.read)
        else:
            text = await asyncio.to_thread(Path(source).read_text, encoding="utf-8")
    except OSError as e:
        return CommandOutcome.error(f"Cannot read '{source}': {e.strerror or e}")
    except UnicodeDecodeError:
        return CommandOutcome.error(f"Cannot read '{source}': not UTF-8 text")

    # File content is data, not console markup.
    writer.write_raw(text.encode("utf-8"))
    return CommandOutcome.ok()


async def run_pipeline(
    source: str, external_commands: Sequence[str]
) -> PipelineExecutionResult:
    """Run ``emit <source> | <external commands...>``; Ctrl+C cancels it."""
    pipeline = ParsedPipeline.from_commands(
        [f"{EMIT_COMMAND} {source}", *external_commands]
    )
    process_executor = ExternalProcessExecutor()
    executor = PipelineExecutor(process_executor)
    cancel_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
        handler_installed = True
    except (NotImplementedError, RuntimeError):
        # Windows event loops do not support signal handlers.
        handler_installed = False

    try:
        return await executor.execute(pipeline, emit_command, cancel_event)
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)


def cmd_run(args: argparse.Namespace) -> int:
    """Execute the run command."""
    console = Console(highlight=False)
    error_console = Console(stderr=True, highlight=False)
    result = asyncio.run(run_pipeline(args.input, args.external))
    return render_pipeline_result(
        result, console, error_console=error_console, quiet=args.quiet
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging()

    if args.command == "run":
        return cmd_run(args)

    build_parser().print_help(sys.stderr)
    return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
