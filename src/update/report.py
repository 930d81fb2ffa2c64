"""Human-readable lines for update verdicts."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from constants import Channel
from versioning.models import Version

if TYPE_CHECKING:  # pragma: no cover
    from update.decision import UpdatePlan, UpdateVerdict

_UNAVAILABLE = "(Unavailable)"


def version_tag(plan: "UpdatePlan") -> str:
    """Tag shown next to the current version in check-only output."""
    if plan.override_url:
        return "(custom)"
    return f"({plan.active_channel.value})"


def latest_label(verdict: "UpdateVerdict") -> str:
    if verdict.coordinate is None:
        return _UNAVAILABLE
    return verdict.coordinate.resolved_version


def no_updates_line(channel: Channel) -> str:
    return f"No new {channel.value} updates are available for this version of blade."


def latest_line(current: Version, channel: Channel) -> str:
    return f"Current blade version {current} is the latest {channel.value} version."


def newer_than_latest_line(current: Version, candidate: Optional[Version], channel: Channel) -> str:
    released = " (released)" if channel is Channel.SNAPSHOT and not current.is_snapshot else ""
    return f"Current blade version {current}{released} is greater than the latest {channel.value} version {candidate}"


def downgrade_lines(current: Version, candidate: Optional[Version], command: str) -> List[str]:
    return [
        f"Current blade version {current} is higher than the latest version {candidate}",
        "Not updating, since downgrades are not supported at this time.",
        "If you want to force a downgrade, use the following command:",
        f"\t{command}",
    ]


def _switch_hint(channel: Channel) -> str:
    flag = "-s" if channel is Channel.SNAPSHOT else "-r"
    return f"Pass the {flag} flag to 'blade update' to switch to the {channel.value} channel."


def render_check_report(plan: "UpdatePlan") -> List[str]:
    """Summarize both channels without changing anything.

    Returns:
        Lines in display order.
    """
    release = plan.verdict(Channel.RELEASE)
    snapshot = plan.verdict(Channel.SNAPSHOT)
    lines = [
        f"Current blade version: {plan.current} {version_tag(plan)}",
        f"Latest release version: {latest_label(release)}",
        f"Latest snapshot version: {latest_label(snapshot)}",
    ]
    for verdict in (release, snapshot):
        if not verdict.should_update:
            lines.append(no_updates_line(verdict.channel))
            continue
        lines.append(f"A new {verdict.channel.value} update is available for blade: {latest_label(verdict)}")
        if verdict.channel is not plan.active_channel:
            lines.append(_switch_hint(verdict.channel))
    return lines
