"""Version string parsing and comparison.

Versions are validated once here and handed around as ``Version`` objects;
callers compare parsed values rather than re-matching strings.
"""

import re
from typing import Optional, Union

from common.errors import MalformedVersion
from .models import Ordering, QualifierFormat, SemanticVersion, SnapshotQualifier, Version

_VERSION_RE = re.compile(
    r"(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:"
    r"(?P<local>[.-]SNAPSHOT(?P<local_ordinal>\d*))"
    r"|(?P<published>-(?P<date>\d+)\.(?P<hhmm>\d{4})(?P<ss>\d{2})-(?P<build>\d+))"
    r")?"
)

Comparable = Union[Version, SemanticVersion]


def _parse_qualifier(match: "re.Match[str]") -> Optional[SnapshotQualifier]:
    if match.group("local"):
        digits = match.group("local_ordinal")
        if digits:
            return SnapshotQualifier(
                format=QualifierFormat.LOCAL,
                raw=match.group("local"),
                ordinal=int(digits),
            )
        return SnapshotQualifier(format=QualifierFormat.LABEL, raw=match.group("local"))
    if match.group("published"):
        date, hhmm = match.group("date"), match.group("hhmm")
        return SnapshotQualifier(
            format=QualifierFormat.PUBLISHED,
            raw=match.group("published"),
            ordinal=int(date + hhmm),
            timestamp=f"{date}.{hhmm}{match.group('ss')}",
            build=int(match.group("build")),
        )
    return None


def parse_version(text: str) -> Version:
    """Parse ``major.minor.patch`` with an optional snapshot qualifier.

    Args:
        text: Raw version, e.g. "1.2.0", "4.0.0.SNAPSHOT202005051744",
            "4.0.0-20200505.174412-3" or "4.0.0-SNAPSHOT".

    Returns:
        Version: The parsed value; ``raw`` keeps the normalized text.

    Raises:
        MalformedVersion: If the text does not match.
    """
    if not isinstance(text, str):
        raise MalformedVersion(text)
    normalized = text.strip().upper()
    match = _VERSION_RE.fullmatch(normalized)
    if match is None:
        raise MalformedVersion(text)
    semantic = SemanticVersion(
        int(match.group("major")),
        int(match.group("minor")),
        int(match.group("patch")),
    )
    return Version(semantic=semantic, raw=normalized, qualifier=_parse_qualifier(match))


def _semantic(value: Comparable) -> SemanticVersion:
    return value.semantic if isinstance(value, Version) else value


def compare(a: Comparable, b: Comparable) -> Ordering:
    """Numeric comparison of the major.minor.patch triples."""
    left, right = _semantic(a), _semantic(b)
    if left < right:
        return Ordering.LESS
    if left > right:
        return Ordering.GREATER
    return Ordering.EQUAL


def compare_ordinals(a: Version, b: Version) -> Optional[Ordering]:
    """Compare snapshot ordinals, or None unless both versions carry one."""
    if a.ordinal is None or b.ordinal is None:
        return None
    if a.ordinal < b.ordinal:
        return Ordering.LESS
    if a.ordinal > b.ordinal:
        return Ordering.GREATER
    return Ordering.EQUAL


def versions_equal(current: Version, candidate: Version) -> bool:
    """Equality used for the "already latest" message.

    A local snapshot and a published snapshot are compared by ordinal only;
    everything else by the numeric triple.
    """
    if (
        current.qualifier is not None
        and current.qualifier.format is QualifierFormat.LOCAL
        and candidate.qualifier is not None
        and candidate.qualifier.format is QualifierFormat.PUBLISHED
    ):
        return current.ordinal == candidate.ordinal
    return compare(current, candidate) is Ordering.EQUAL


def is_downgrade(current: Version, candidate: Version) -> bool:
    """True when installing ``candidate`` would move ``current`` backwards."""
    order = compare(current, candidate)
    if order is not Ordering.EQUAL:
        return order is Ordering.GREATER
    return compare_ordinals(current, candidate) is Ordering.GREATER
