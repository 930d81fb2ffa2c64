"""Update decision engine.

Evaluates the release and snapshot channels for the running version,
produces one immutable ``UpdateVerdict`` per channel and acts on the
verdict of the active channel.
"""
from __future__ import annotations

import logging
import sys
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from cli_config import UpdateSettings
from constants import Channel, ExitCodes
from common.errors import UpdateError
from common.logging_utils import extra_context, is_debug_enabled
from registry.maven.metadata import MetadataClient
from update import report
from update.integrity import IntegrityVerifier
from versioning.models import ArtifactCoordinate, Ordering, Version
from versioning.parser import compare, compare_ordinals, is_downgrade, parse_version, versions_equal

logger = logging.getLogger(__name__)

Emitter = Callable[[str], None]


def _stdout(message: str) -> None:
    print(message)


def _stderr(message: str) -> None:
    sys.stderr.write(message + "\n")


class Reason(Enum):
    """Machine-readable reason attached to a verdict."""
    UNAVAILABLE = "unavailable"
    ALREADY_CURRENT = "already_current"
    NEWER_VERSION = "newer_version"
    NEWER_SNAPSHOT_BUILD = "newer_snapshot_build"
    NOT_NEWER = "not_newer"


@dataclass(frozen=True)
class UpdateVerdict:
    """Update decision for one channel."""
    current_version: Version
    candidate_version: Optional[Version]
    channel: Channel
    should_update: bool
    reason: Reason
    coordinate: Optional[ArtifactCoordinate] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class UpdatePlan:
    """Both channel verdicts of one pass plus the channel that governs behavior."""
    current: Version
    active_channel: Channel
    verdicts: Dict[Channel, UpdateVerdict]
    override_url: Optional[str] = None

    @property
    def active(self) -> UpdateVerdict:
        return self.verdicts[self.active_channel]

    def verdict(self, channel: Channel) -> UpdateVerdict:
        return self.verdicts[channel]


def select_channel(
    current: Version,
    release: bool = False,
    snapshots: bool = False,
    override_url: Optional[str] = None,
) -> Channel:
    """Pick the active channel: explicit flag, then the running version's marker."""
    if snapshots:
        return Channel.SNAPSHOT
    if release:
        return Channel.RELEASE
    if override_url:
        return Channel.RELEASE
    return Channel.SNAPSHOT if current.is_snapshot else Channel.RELEASE


def decide(
    current: Version,
    channel: Channel,
    candidate: Optional[Version],
    md5_matches: bool,
    coordinate: Optional[ArtifactCoordinate] = None,
) -> UpdateVerdict:
    """Turn one channel's candidate into a verdict."""
    def verdict(should_update: bool, reason: Reason) -> UpdateVerdict:
        return UpdateVerdict(current, candidate, channel, should_update, reason, coordinate)

    if candidate is None:
        return verdict(False, Reason.UNAVAILABLE)
    if md5_matches:
        return verdict(False, Reason.ALREADY_CURRENT)
    order = compare(candidate, current)
    if order is Ordering.GREATER:
        return verdict(True, Reason.NEWER_VERSION)
    if order is Ordering.LESS:
        return verdict(False, Reason.NOT_NEWER)
    if channel is Channel.SNAPSHOT and compare_ordinals(candidate, current) is Ordering.GREATER:
        return verdict(True, Reason.NEWER_SNAPSHOT_BUILD)
    return verdict(False, Reason.NOT_NEWER)


class UpdateEngine:
    """Runs one resolution pass and acts on the active channel's verdict."""

    def __init__(
        self,
        settings: UpdateSettings,
        client: Optional[MetadataClient] = None,
        verifier: Optional[IntegrityVerifier] = None,
        emit: Emitter = _stdout,
        emit_error: Emitter = _stderr,
    ):
        self.settings = settings
        self.client = client or MetadataClient(settings.artifact_id, selection=settings.latest_selection)
        self.verifier = verifier or IntegrityVerifier()
        self.emit = emit
        self.emit_error = emit_error

    def evaluate_channel(self, current: Version, channel: Channel) -> UpdateVerdict:
        """Resolve and judge one channel.

        Transport and metadata errors propagate; a candidate that is not a
        valid version makes the channel unavailable.
        """
        base_url = self.settings.base_url_for(channel)
        try:
            coordinate = self.client.resolve_latest(channel, base_url)
            candidate = parse_version(coordinate.resolved_version) if coordinate else None
        except ValueError as exc:
            logger.warning("Ignoring %s candidate: %s", channel.value, exc)
            return UpdateVerdict(current, None, channel, False, Reason.UNAVAILABLE, error=str(exc))

        md5_matches = False
        if coordinate is not None:
            md5_matches = self.verifier.matches(self.settings.binary_path, coordinate.md5_url)
        result = decide(current, channel, candidate, md5_matches, coordinate)
        if is_debug_enabled(logger):
            logger.debug(
                "Channel verdict",
                extra=extra_context(
                    event="decision",
                    component="engine",
                    action="evaluate_channel",
                    channel=channel.value,
                    outcome=result.reason.value,
                    candidate=str(candidate) if candidate else None
                )
            )
        return result

    def plan(self, current_version: str, release: bool = False, snapshots: bool = False) -> UpdatePlan:
        """Evaluate both channels for ``current_version``.

        Raises:
            MalformedVersion: If the running version cannot be parsed.
            RepositoryUnreachable: If a repository cannot be reached.
            MetadataParseError: If an index document is malformed.
        """
        current = parse_version(current_version)
        verdicts = {
            channel: self.evaluate_channel(current, channel)
            for channel in (Channel.RELEASE, Channel.SNAPSHOT)
        }
        active = select_channel(current, release, snapshots, self.settings.override_url)
        return UpdatePlan(current, active, verdicts, self.settings.override_url)

    def run(
        self,
        current_version: str,
        *,
        check_only: bool = False,
        release: bool = False,
        snapshots: bool = False,
        executor=None,
    ) -> ExitCodes:
        """Check for updates and apply the active channel's update when due."""
        try:
            plan = self.plan(current_version, release=release, snapshots=snapshots)
        except UpdateError as exc:
            self._report_failure(exc)
            return exc.code

        if plan.override_url:
            self.emit(f"Custom URL specified: {plan.override_url}")
        for verdict in plan.verdicts.values():
            if verdict.error:
                self.emit_error(f"Could not evaluate the latest {verdict.channel.value} version: {verdict.error}")

        if check_only:
            for line in report.render_check_report(plan):
                self.emit(line)
            return ExitCodes.SUCCESS

        active = plan.active
        if active.coordinate is None:
            self.emit(report.no_updates_line(active.channel))
            return ExitCodes.SUCCESS

        if active.should_update:
            if executor is None:
                from update.executor import select_executor  # pylint: disable=import-outside-toplevel
                executor = select_executor(self.settings, emit=self.emit, emit_error=self.emit_error)
            self.emit(f"Updating from: {active.coordinate.download_url}")
            result = executor.apply(active.coordinate.download_url)
            return ExitCodes.SUCCESS if result.success else ExitCodes.INSTALL_ERROR

        for line in self._not_updating_lines(active):
            self.emit(line)
        return ExitCodes.SUCCESS

    def _not_updating_lines(self, verdict: UpdateVerdict):
        candidate = verdict.candidate_version
        if verdict.reason is Reason.ALREADY_CURRENT or versions_equal(verdict.current_version, candidate):
            return [report.latest_line(verdict.current_version, verdict.channel)]
        if is_downgrade(verdict.current_version, candidate):
            return report.downgrade_lines(
                verdict.current_version,
                candidate,
                self.settings.install_command_line(verdict.coordinate.download_url),
            )
        return [report.newer_than_latest_line(verdict.current_version, candidate, verdict.channel)]

    def _report_failure(self, exc: UpdateError) -> None:
        logger.debug("Update check failed", exc_info=True)
        self.emit_error("Could not determine if blade update is available.")
        self.emit_error(str(exc))
        if self.settings.trace:
            self.emit_error("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip())
        else:
            self.emit_error("For more information run update with '--trace' option.")
