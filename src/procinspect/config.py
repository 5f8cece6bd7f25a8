"""Runtime configuration for procinspect."""

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field

from procinspect.models import ViewSelection

DEFAULT_PROC_ROOT = "/proc"
ROOT_ENV = "PROCINSPECT_ROOT"
DEBUG_ENV = "PROCINSPECT_DEBUG"

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@dataclass(slots=True, frozen=True)
class InspectorConfig:
    """Settings for one inspection session."""

    proc_root: str = DEFAULT_PROC_ROOT
    views: ViewSelection = field(default_factory=ViewSelection)
    interval: float = 1.0
    tui: bool = False
    verbose: bool = False

    @classmethod
    def from_args(cls, args, environ: Mapping[str, str] | None = None) -> "InspectorConfig":
        """
        Build a config from parsed arguments and the environment.

        An explicit proc directory wins over PROCINSPECT_ROOT; setting
        PROCINSPECT_DEBUG to a true value has the same effect as --verbose.
        """
        environ = os.environ if environ is None else environ
        proc_root = args.proc or environ.get(ROOT_ENV) or DEFAULT_PROC_ROOT
        verbose = args.verbose or _truthy(environ.get(DEBUG_ENV, ""))
        views = ViewSelection.resolve(
            all_views=args.all,
            hardware=args.hardware,
            live=args.live,
            system=args.system,
            tasks=args.tasks,
        )
        return cls(
            proc_root=proc_root,
            views=views,
            interval=args.interval,
            tui=args.tui,
            verbose=verbose,
        )


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Send procinspect log records to stderr, at DEBUG when verbose."""
    logger = logging.getLogger("procinspect")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
