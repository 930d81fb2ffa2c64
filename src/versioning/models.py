"""Data models for versions and resolved artifacts."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from constants import Channel, Constants


class Ordering(Enum):
    """Result of comparing two versions."""
    LESS = -1
    EQUAL = 0
    GREATER = 1

    def __neg__(self) -> "Ordering":
        return Ordering(-self.value)


class QualifierFormat(Enum):
    """Naming format of a snapshot qualifier."""
    LOCAL = "local"          # 4.0.0.SNAPSHOT202005051744
    PUBLISHED = "published"  # 4.0.0-20200505.174412-3
    LABEL = "label"          # 4.0.0-SNAPSHOT


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """Numeric major.minor.patch triple."""
    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise ValueError("version components must be non-negative")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class SnapshotQualifier:
    """Build lineage suffix of a snapshot version.

    ``ordinal`` is the comparable build number shared by the local and
    published formats; ``timestamp`` and ``build`` are informational.
    """
    format: QualifierFormat
    raw: str
    ordinal: Optional[int] = None
    timestamp: Optional[str] = None
    build: Optional[int] = None


@dataclass(frozen=True)
class Version:
    """A parsed version string. Build with ``versioning.parser.parse_version``."""
    semantic: SemanticVersion
    raw: str = field(compare=False)
    qualifier: Optional[SnapshotQualifier] = None

    @property
    def is_snapshot(self) -> bool:
        return self.qualifier is not None or Constants.SNAPSHOT_MARKER in self.raw.upper()

    @property
    def ordinal(self) -> Optional[int]:
        return self.qualifier.ordinal if self.qualifier else None

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class ArtifactCoordinate:
    """Fully resolved download location of one version on one channel."""
    channel: Channel
    channel_base_url: str
    version_label: str
    resolved_version: str
    download_url: str
    md5_url: str

    def __post_init__(self) -> None:
        # Local import: parser depends on this module.
        from versioning.parser import parse_version  # pylint: disable=import-outside-toplevel

        parsed = parse_version(self.resolved_version)
        if (
            self.channel is Channel.SNAPSHOT
            and parsed.qualifier is not None
            and parsed.qualifier.format is QualifierFormat.LABEL
        ):
            raise ValueError(
                f"snapshot coordinate needs a timestamped build id, got {self.resolved_version!r}"
            )
        if not self.download_url or not self.md5_url:
            raise ValueError("artifact coordinate requires download and md5 URLs")
