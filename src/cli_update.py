"""CLI entry point for the blade update command.

Resolves settings once, finds the running version and hands everything to
the update engine.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import sys
from typing import Any, Callable, Optional

from cli_config import apply_runtime_overrides, load_settings
from common.errors import MalformedVersion
from common.logging_utils import configure_logging
from constants import Constants, ExitCodes
from update.decision import UpdateEngine
from update.runtime import current_version, local_binary_path

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.LOG_LEVEL_ENV] = str(args.LOG_LEVEL).upper()

    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _stderr(message: str) -> None:
    sys.stderr.write(message + "\n")


def run_update(
    args: Any,
    *,
    engine_factory: Optional[Callable[..., UpdateEngine]] = None,
    executor=None,
    override_file: str = Constants.UPDATE_URL_FILE,
) -> ExitCodes:
    """Run the update command for parsed ``args`` and return the exit code."""
    _setup_logging(args)

    settings = load_settings(args, override_file=override_file)
    settings = dataclasses.replace(settings, binary_path=local_binary_path(settings))
    apply_runtime_overrides(settings)

    try:
        version = current_version(settings)
    except MalformedVersion as exc:
        _stderr(str(exc))
        return exc.code

    factory = engine_factory or UpdateEngine
    engine = factory(settings)
    logger.debug("Running update for blade %s", version)
    return engine.run(
        version,
        check_only=bool(getattr(args, "CHECK_ONLY", False)),
        release=bool(getattr(args, "RELEASE", False)),
        snapshots=bool(getattr(args, "SNAPSHOTS", False)),
        executor=executor,
    )
