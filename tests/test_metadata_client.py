"""Tests for the Maven metadata client."""

import pytest

from common.errors import MetadataParseError, RepositoryUnreachable
from constants import Channel, LatestSelection
from registry.maven.metadata import MetadataClient, normalize_base_url

BASE = "https://repo.example.com/releases/com/liferay/blade/com.liferay.blade.cli/"
SNAP_BASE = "https://repo.example.com/snapshots/com/liferay/blade/com.liferay.blade.cli/"
ARTIFACT = "com.liferay.blade.cli"


def _index(*versions):
    body = "".join(f"<version>{v}</version>" for v in versions)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>com.liferay.blade</groupId>
  <artifactId>{ARTIFACT}</artifactId>
  <versioning>
    <versions>{body}</versions>
  </versioning>
</metadata>
"""


SNAPSHOT_BUILD_METADATA = """<?xml version="1.0" encoding="UTF-8"?>
<metadata modelVersion="1.1.0">
  <groupId>com.liferay.blade</groupId>
  <artifactId>com.liferay.blade.cli</artifactId>
  <version>4.0.0-SNAPSHOT</version>
  <versioning>
    <snapshot><timestamp>20200505.174412</timestamp><buildNumber>3</buildNumber></snapshot>
    <snapshotVersions>
      <snapshotVersion>
        <classifier>sources</classifier>
        <extension>jar</extension>
        <value>4.0.0-20200505.174401-3</value>
      </snapshotVersion>
      <snapshotVersion>
        <extension>jar</extension>
        <value>4.0.0-20200505.174412-3</value>
      </snapshotVersion>
      <snapshotVersion>
        <extension>pom</extension>
        <value>4.0.0-20200505.174412-3</value>
      </snapshotVersion>
    </snapshotVersions>
  </versioning>
</metadata>
"""


class FakeFetch:
    """Serves canned bodies per URL and records requests."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def __call__(self, url, *, context):
        self.calls.append((url, context))
        if url not in self.pages:
            raise RepositoryUnreachable(url, status_code=404)
        return self.pages[url]


class TestNormalizeBaseUrl:

    def test_adds_slash(self):
        assert normalize_base_url("https://x/y") == "https://x/y/"

    def test_collapses_extra_slashes(self):
        assert normalize_base_url("https://x/y//") == "https://x/y/"


class TestResolveRelease:
    """Release channel resolution."""

    def test_snapshot_entries_are_excluded(self):
        fetch = FakeFetch({BASE + "maven-metadata.xml": _index("1.0.0", "1.2.0", "2.0.0-SNAPSHOT")})
        client = MetadataClient(ARTIFACT, fetch=fetch)

        coord = client.resolve_latest(Channel.RELEASE, BASE)

        assert coord.resolved_version == "1.2.0"
        assert coord.version_label == "1.2.0"
        assert coord.download_url == BASE + "1.2.0/com.liferay.blade.cli-1.2.0.jar"
        assert coord.md5_url == BASE + "1.2.0/com.liferay.blade.cli-1.2.0.jar.md5"
        assert coord.channel is Channel.RELEASE
        assert fetch.calls == [(BASE + "maven-metadata.xml", "release")]

    def test_document_order_wins_over_semver(self):
        fetch = FakeFetch({BASE + "maven-metadata.xml": _index("3.0.0", "1.0.0")})
        client = MetadataClient(ARTIFACT, fetch=fetch)

        assert client.resolve_latest(Channel.RELEASE, BASE).resolved_version == "1.0.0"

    def test_semantic_selection(self):
        fetch = FakeFetch({BASE + "maven-metadata.xml": _index("3.0.0", "garbage", "1.10.0")})
        client = MetadataClient(ARTIFACT, fetch=fetch, selection=LatestSelection.SEMANTIC)

        assert client.resolve_latest(Channel.RELEASE, BASE).resolved_version == "3.0.0"

    def test_base_without_trailing_slash(self):
        fetch = FakeFetch({BASE + "maven-metadata.xml": _index("1.0.0")})
        client = MetadataClient(ARTIFACT, fetch=fetch)

        coord = client.resolve_latest(Channel.RELEASE, BASE.rstrip("/"))

        assert coord.channel_base_url == BASE
        assert coord.download_url.startswith(BASE + "1.0.0/")

    def test_not_found_when_no_release(self):
        fetch = FakeFetch({BASE + "maven-metadata.xml": _index("2.0.0-SNAPSHOT")})
        client = MetadataClient(ARTIFACT, fetch=fetch)

        assert client.resolve_latest(Channel.RELEASE, BASE) is None

    def test_empty_index(self):
        fetch = FakeFetch({BASE + "maven-metadata.xml": "<metadata/>"})
        assert MetadataClient(ARTIFACT, fetch=fetch).resolve_latest(Channel.RELEASE, BASE) is None

    def test_unreachable_propagates(self):
        client = MetadataClient(ARTIFACT, fetch=FakeFetch({}))
        with pytest.raises(RepositoryUnreachable):
            client.resolve_latest(Channel.RELEASE, BASE)

    def test_malformed_index_raises_parse_error(self):
        fetch = FakeFetch({BASE + "maven-metadata.xml": "<metadata><versions>"})
        client = MetadataClient(ARTIFACT, fetch=fetch)
        with pytest.raises(MetadataParseError):
            client.resolve_latest(Channel.RELEASE, BASE)


class TestResolveSnapshot:
    """Snapshot channel resolution."""

    def _fetch(self):
        return FakeFetch({
            SNAP_BASE + "maven-metadata.xml": _index("3.9.0-SNAPSHOT", "4.0.0-SNAPSHOT"),
            SNAP_BASE + "4.0.0-SNAPSHOT/maven-metadata.xml": SNAPSHOT_BUILD_METADATA,
        })

    def test_resolves_timestamped_build(self):
        fetch = self._fetch()
        client = MetadataClient(ARTIFACT, fetch=fetch)

        coord = client.resolve_latest(Channel.SNAPSHOT, SNAP_BASE)

        assert coord.version_label == "4.0.0-SNAPSHOT"
        assert coord.resolved_version == "4.0.0-20200505.174412-3"
        assert coord.download_url == (
            SNAP_BASE + "4.0.0-SNAPSHOT/com.liferay.blade.cli-4.0.0-20200505.174412-3.jar"
        )
        assert coord.md5_url == coord.download_url + ".md5"
        assert len(fetch.calls) == 2

    def test_first_value_when_no_plain_jar(self):
        metadata = (
            "<metadata><versioning><snapshotVersions>"
            "<snapshotVersion><extension>pom</extension><value>4.0.0-20200101.000000-1</value></snapshotVersion>"
            "</snapshotVersions></versioning></metadata>"
        )
        fetch = FakeFetch({
            SNAP_BASE + "maven-metadata.xml": _index("4.0.0-SNAPSHOT"),
            SNAP_BASE + "4.0.0-SNAPSHOT/maven-metadata.xml": metadata,
        })

        coord = MetadataClient(ARTIFACT, fetch=fetch).resolve_latest(Channel.SNAPSHOT, SNAP_BASE)

        assert coord.resolved_version == "4.0.0-20200101.000000-1"

    def test_missing_build_value(self):
        fetch = FakeFetch({
            SNAP_BASE + "maven-metadata.xml": _index("4.0.0-SNAPSHOT"),
            SNAP_BASE + "4.0.0-SNAPSHOT/maven-metadata.xml": "<metadata/>",
        })
        with pytest.raises(MetadataParseError):
            MetadataClient(ARTIFACT, fetch=fetch).resolve_latest(Channel.SNAPSHOT, SNAP_BASE)

    def test_release_entries_are_excluded(self):
        fetch = FakeFetch({SNAP_BASE + "maven-metadata.xml": _index("1.0.0")})
        assert MetadataClient(ARTIFACT, fetch=fetch).resolve_latest(Channel.SNAPSHOT, SNAP_BASE) is None


class TestNamespacedMetadata:
    """Indexes that declare the Maven metadata XML namespace."""

    NS = "http://maven.apache.org/METADATA/1.1.0"

    def test_release_versions_in_default_namespace(self):
        index = _index("1.0.0", "1.2.0").replace("<metadata>", f'<metadata xmlns="{self.NS}">')
        client = MetadataClient(ARTIFACT, fetch=FakeFetch({BASE + "maven-metadata.xml": index}))

        coord = client.resolve_latest(Channel.RELEASE, BASE)

        assert coord.resolved_version == "1.2.0"

    def test_snapshot_build_in_default_namespace(self):
        build = SNAPSHOT_BUILD_METADATA.replace(
            '<metadata modelVersion="1.1.0">', f'<metadata xmlns="{self.NS}" modelVersion="1.1.0">'
        )
        fetch = FakeFetch({
            SNAP_BASE + "maven-metadata.xml": _index("4.0.0-SNAPSHOT"),
            SNAP_BASE + "4.0.0-SNAPSHOT/maven-metadata.xml": build,
        })

        coord = MetadataClient(ARTIFACT, fetch=fetch).resolve_latest(Channel.SNAPSHOT, SNAP_BASE)

        assert coord.resolved_version == "4.0.0-20200505.174412-3"
