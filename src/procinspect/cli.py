"""Command line entry point and session controller."""

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from typing import TextIO

from procinspect.config import DEFAULT_PROC_ROOT, InspectorConfig, configure_logging
from procinspect.procfs import ProcFS
from procinspect.report import render_hardware, render_live, render_system, render_tasks

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_ROOT = 1
EXIT_INTERRUPTED = 130


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="procinspect",
        description="Summarize the system using the proc pseudo filesystem.",
    )
    parser.add_argument(
        "-a", "--all", action="store_true",
        help="display all sections (equivalent to -rst, default)",
    )
    parser.add_argument(
        "-l", "--live", action="store_true",
        help="live view; cannot be used with other view options",
    )
    parser.add_argument(
        "-p", "--proc", metavar="PROCFS_DIR",
        help="change the expected procfs mount point (default: /proc)",
    )
    parser.add_argument("-r", "--hardware", action="store_true", help="hardware information")
    parser.add_argument("-s", "--system", action="store_true", help="system information")
    parser.add_argument("-t", "--tasks", action="store_true", help="task information")
    parser.add_argument(
        "-i", "--interval", type=_positive_float, default=1.0, metavar="SECONDS",
        help="CPU sampling window in seconds (default: 1)",
    )
    parser.add_argument(
        "--tui", action="store_true",
        help="open the interactive full-screen dashboard",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")
    return parser


def run_views(config: InspectorConfig, proc: ProcFS, out: TextIO | None = None) -> int:
    """Render the selected sections in order: live, system, hardware, tasks."""
    views = config.views
    if views.live:
        try:
            render_live(proc, out, interval=config.interval)
        except KeyboardInterrupt:
            return EXIT_INTERRUPTED
        return EXIT_OK
    if views.system:
        render_system(proc, out)
    if views.hardware:
        render_hardware(proc, out, interval=config.interval)
    if views.tasks:
        render_tasks(proc, out)
    if proc.failures:
        logger.debug("%d fields could not be extracted", len(proc.failures))
    return EXIT_OK


def run(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    """
    Run one inspection session.

    Returns the process exit code. Argument errors exit through argparse
    (status 2) before anything is read.
    """
    args = build_parser().parse_args(argv)
    config = InspectorConfig.from_args(args)
    configure_logging(config.verbose)

    if config.proc_root != DEFAULT_PROC_ROOT:
        logger.debug("Using alternative proc directory: %s", config.proc_root)
    if config.views.live:
        logger.debug("Live view enabled. Ignoring other view options.")
    else:
        logger.debug("View options selected: %s", " ".join(config.views.names))

    try:
        os.chdir(config.proc_root)
    except OSError as exc:
        logger.error("cannot use proc directory %s: %s", config.proc_root, exc.strerror or exc)
        return EXIT_BAD_ROOT

    proc = ProcFS(".")
    if config.tui:
        # Imported lazily so plain reports do not pay for Textual
        from procinspect.app import InspectorApp

        InspectorApp(proc, poll_rate=config.interval).run()
        return EXIT_OK
    return run_views(config, proc, out)


def main() -> None:
    """Entry point for procinspect."""
    sys.exit(run())


if __name__ == "__main__":
    main()
