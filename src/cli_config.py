"""Runtime settings for the update command.

Merges built-in constants, the YAML config file, the user-scoped override
URL file and CLI flags into one ``UpdateSettings`` resolved at startup and
passed explicitly to the engine.
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from constants import Channel, Constants, LatestSelection, _load_yaml_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateSettings:
    """Resolved configuration for one invocation."""

    release_url: str = Constants.RELEASES_REPO_URL
    snapshot_url: str = Constants.SNAPSHOTS_REPO_URL
    artifact_id: str = Constants.ARTIFACT_ID
    install_command: Tuple[str, ...] = tuple(Constants.INSTALL_COMMAND)
    override_url: Optional[str] = None
    binary_path: Optional[str] = None
    base_dir: str = "."
    current_version: Optional[str] = None
    request_timeout: float = Constants.REQUEST_TIMEOUT
    latest_selection: LatestSelection = LatestSelection.DOCUMENT_ORDER
    trace: bool = False

    def base_url_for(self, channel: Channel) -> str:
        """Base URL searched for ``channel``; an override URL serves both channels."""
        if self.override_url:
            return self.override_url
        return self.snapshot_url if channel is Channel.SNAPSHOT else self.release_url

    def install_command_line(self, download_url: str) -> str:
        """The literal install command an operator could run by hand."""
        return " ".join(list(self.install_command) + [download_url])


def read_override_url(path: str = Constants.UPDATE_URL_FILE) -> Optional[str]:
    """Return the first line of the override URL file, or None when absent/empty."""
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as fh:
            first = fh.readline().strip()
    except OSError as exc:
        logger.warning("Could not read update URL file %s: %s", path, exc)
        return None
    return first or None


def _install_command(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return tuple(shlex.split(value))
    if isinstance(value, (list, tuple)) and value:
        return tuple(str(v) for v in value)
    return tuple(Constants.INSTALL_COMMAND)


def _latest_selection(value: Any) -> LatestSelection:
    try:
        return LatestSelection(str(value).lower())
    except ValueError:
        logger.warning("Unknown latest_selection %r, using %s", value, Constants.LATEST_SELECTION)
        return LatestSelection(Constants.LATEST_SELECTION)


def load_settings(args: Any, override_file: str = Constants.UPDATE_URL_FILE) -> UpdateSettings:
    """Build settings with precedence CLI > override file > YAML config > defaults.

    Args:
        args: Parsed CLI namespace (see args.parse_args).
        override_file: Location of the user-scoped override URL file.

    Returns:
        UpdateSettings: Frozen settings for this invocation.
    """
    cfg: Dict[str, Any] = _load_yaml_config(getattr(args, "CONFIG", None))

    override_url = getattr(args, "URL", None) or read_override_url(override_file) or cfg.get("url")
    if override_url:
        logger.debug("Using override update URL")

    timeout = cfg.get("request_timeout", Constants.REQUEST_TIMEOUT)
    try:
        timeout = float(timeout)
    except (TypeError, ValueError):
        logger.warning("Invalid request_timeout %r, using %s", timeout, Constants.REQUEST_TIMEOUT)
        timeout = Constants.REQUEST_TIMEOUT

    return UpdateSettings(
        release_url=str(cfg.get("release_url") or Constants.RELEASES_REPO_URL),
        snapshot_url=str(cfg.get("snapshot_url") or Constants.SNAPSHOTS_REPO_URL),
        artifact_id=str(cfg.get("artifact_id") or Constants.ARTIFACT_ID),
        install_command=_install_command(cfg.get("install_command")),
        override_url=override_url,
        binary_path=getattr(args, "BINARY", None) or cfg.get("binary_path"),
        base_dir=getattr(args, "BASE", None) or cfg.get("base_dir") or os.getcwd(),
        current_version=getattr(args, "CURRENT_VERSION", None) or cfg.get("current_version"),
        request_timeout=timeout,
        latest_selection=_latest_selection(cfg.get("latest_selection", Constants.LATEST_SELECTION)),
        trace=bool(getattr(args, "TRACE", False)),
    )


def apply_runtime_overrides(settings: UpdateSettings) -> None:
    """Push settings that shared helpers read from Constants (HTTP timeout)."""
    Constants.REQUEST_TIMEOUT = settings.request_timeout  # type: ignore[assignment]
