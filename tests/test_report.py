"""Tests for check-only report rendering."""

from constants import Channel
from update.decision import Reason, UpdatePlan, UpdateVerdict
from update.report import downgrade_lines, newer_than_latest_line, render_check_report, version_tag
from versioning.models import ArtifactCoordinate
from versioning.parser import parse_version


def _verdict(current, channel, resolved=None, should_update=False, reason=Reason.UNAVAILABLE):
    coord = None
    candidate = None
    if resolved:
        url = f"https://repo.example.com/{resolved}/com.liferay.blade.cli-{resolved}.jar"
        coord = ArtifactCoordinate(channel, "https://repo.example.com/", resolved, resolved, url, url + ".md5")
        candidate = parse_version(resolved)
    return UpdateVerdict(current, candidate, channel, should_update, reason, coord)


def _plan(current_text, release=None, snapshot=None, active=Channel.RELEASE, override_url=None):
    current = parse_version(current_text)
    release = release or {}
    snapshot = snapshot or {}
    verdicts = {
        Channel.RELEASE: _verdict(current, Channel.RELEASE, **release),
        Channel.SNAPSHOT: _verdict(current, Channel.SNAPSHOT, **snapshot),
    }
    return UpdatePlan(current, active, verdicts, override_url)


def test_nothing_available():
    lines = render_check_report(_plan("1.2.0"))
    assert lines == [
        "Current blade version: 1.2.0 (release)",
        "Latest release version: (Unavailable)",
        "Latest snapshot version: (Unavailable)",
        "No new release updates are available for this version of blade.",
        "No new snapshot updates are available for this version of blade.",
    ]


def test_release_update_on_active_channel():
    plan = _plan(
        "1.2.0",
        release={"resolved": "1.3.0", "should_update": True, "reason": Reason.NEWER_VERSION},
        snapshot={"resolved": "1.3.0-20200505.174412-3", "should_update": True, "reason": Reason.NEWER_VERSION},
    )

    lines = render_check_report(plan)

    assert "Latest release version: 1.3.0" in lines
    assert "Latest snapshot version: 1.3.0-20200505.174412-3" in lines
    assert "A new release update is available for blade: 1.3.0" in lines
    assert "A new snapshot update is available for blade: 1.3.0-20200505.174412-3" in lines
    assert "Pass the -s flag to 'blade update' to switch to the snapshot channel." in lines
    assert not any("-r flag" in line for line in lines)


def test_release_hint_from_snapshot_channel():
    plan = _plan(
        "1.2.0.SNAPSHOT5",
        release={"resolved": "1.3.0", "should_update": True, "reason": Reason.NEWER_VERSION},
        active=Channel.SNAPSHOT,
    )

    lines = render_check_report(plan)

    assert lines[0] == "Current blade version: 1.2.0.SNAPSHOT5 (snapshot)"
    assert "Pass the -r flag to 'blade update' to switch to the release channel." in lines


def test_custom_tag():
    assert version_tag(_plan("1.2.0", override_url="https://mirror/")) == "(custom)"


def test_downgrade_lines_include_command():
    lines = downgrade_lines(parse_version("3.0.0"), parse_version("2.9.0"), "jpm install -f https://x/a.jar")
    assert lines[0] == "Current blade version 3.0.0 is higher than the latest version 2.9.0"
    assert lines[-1] == "\tjpm install -f https://x/a.jar"


def test_newer_than_latest_marks_released_build_on_snapshot_channel():
    line = newer_than_latest_line(parse_version("3.0.0"), parse_version("3.0.0-20200505.174412-3"), Channel.SNAPSHOT)
    assert line == "Current blade version 3.0.0 (released) is greater than the latest snapshot version 3.0.0-20200505.174412-3"
