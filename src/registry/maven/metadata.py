"""Maven repository metadata client.

Reads ``maven-metadata.xml`` version indexes for one channel and resolves
the latest qualifying version into a complete ``ArtifactCoordinate``.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Callable, List, Optional

from constants import Channel, Constants, LatestSelection
from common import http_client
from common.errors import MalformedVersion, MetadataParseError
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from versioning.models import ArtifactCoordinate
from versioning.parser import parse_version

logger = logging.getLogger(__name__)

Fetcher = Callable[..., str]


def normalize_base_url(base_url: str) -> str:
    """Return ``base_url`` with exactly one trailing slash."""
    return base_url.strip().rstrip("/") + "/"


def _is_snapshot(version: str) -> bool:
    return Constants.SNAPSHOT_MARKER in version


class MetadataClient:
    """Resolve the latest artifact of a channel from a Maven-layout repository."""

    def __init__(
        self,
        artifact_id: str = Constants.ARTIFACT_ID,
        fetch: Optional[Fetcher] = None,
        selection: LatestSelection = LatestSelection.DOCUMENT_ORDER,
    ):
        self.artifact_id = artifact_id
        self._fetch = fetch or http_client.fetch_text
        self.selection = selection

    def _fetch_root(self, url: str, context: str) -> ET.Element:
        text = self._fetch(url, context=context)
        try:
            return ET.fromstring(text)
        except ET.ParseError as exc:
            raise MetadataParseError(url, details=str(exc)) from exc

    def fetch_versions(self, base_url: str, channel: Channel) -> List[str]:
        """Fetch the channel's index and list matching versions in document order.

        Args:
            base_url: Channel base URL (directory holding maven-metadata.xml).
            channel: Keeps snapshot identifiers for SNAPSHOT, the rest otherwise.

        Returns:
            List of version strings.
        """
        url = normalize_base_url(base_url) + Constants.METADATA_FILE
        root = self._fetch_root(url, context=channel.value)
        want_snapshot = channel is Channel.SNAPSHOT
        versions = []
        for version_elem in root.iter("{*}version"):
            text = (version_elem.text or "").strip()
            if text and _is_snapshot(text) == want_snapshot:
                versions.append(text)
        if is_debug_enabled(logger):
            logger.debug(
                "Parsed version index",
                extra=extra_context(
                    event="parse",
                    component="metadata",
                    action="fetch_versions",
                    target=safe_url(url),
                    channel=channel.value,
                    count=len(versions)
                )
            )
        return versions

    def pick_latest(self, versions: List[str]) -> Optional[str]:
        """Pick the latest entry according to the configured selection."""
        if not versions:
            return None
        if self.selection is LatestSelection.DOCUMENT_ORDER:
            # The repository lists versions ascending; trust its order.
            return versions[-1]
        best = None
        best_key = None
        for candidate in versions:
            try:
                parsed = parse_version(candidate)
            except MalformedVersion:
                logger.debug("Skipping unparseable version %s", candidate)
                continue
            key = (parsed.semantic, parsed.ordinal or 0)
            if best_key is None or key >= best_key:
                best, best_key = candidate, key
        return best

    def resolve_snapshot_build(self, base_url: str, version: str) -> str:
        """Resolve a ``-SNAPSHOT`` label to its timestamped build identifier."""
        url = f"{normalize_base_url(base_url)}{version}/{Constants.METADATA_FILE}"
        root = self._fetch_root(url, context="snapshot")
        values = []
        for snapshot_version in root.iter("{*}snapshotVersion"):
            value = (snapshot_version.findtext("{*}value") or "").strip()
            if not value:
                continue
            extension = (snapshot_version.findtext("{*}extension") or "").strip()
            classifier = (snapshot_version.findtext("{*}classifier") or "").strip()
            if extension == "jar" and not classifier:
                return value
            values.append(value)
        if not values:
            raise MetadataParseError(url, details="no snapshotVersion value")
        return values[0]

    def resolve_latest(self, channel: Channel, base_url: str) -> Optional[ArtifactCoordinate]:
        """Resolve the latest version of ``channel`` into an artifact coordinate.

        Returns:
            The coordinate, or None when the index holds no matching version.

        Raises:
            RepositoryUnreachable: On transport failure.
            MetadataParseError: On a malformed index document.
            MalformedVersion: When the resolved identifier is not a version.
        """
        base = normalize_base_url(base_url)
        version = self.pick_latest(self.fetch_versions(base, channel))
        if version is None:
            logger.debug("No %s versions found at %s", channel.value, safe_url(base))
            return None
        resolved = version
        if channel is Channel.SNAPSHOT:
            resolved = self.resolve_snapshot_build(base, version)
        download_url = f"{base}{version}/{self.artifact_id}-{resolved}.jar"
        return ArtifactCoordinate(
            channel=channel,
            channel_base_url=base,
            version_label=version,
            resolved_version=resolved,
            download_url=download_url,
            md5_url=download_url + ".md5",
        )
