"""Locate the installed blade jar and read its version."""
from __future__ import annotations

import logging
import os
import re
import shutil
import zipfile
from typing import Optional

from cli_config import UpdateSettings
from common.errors import MalformedVersion
from constants import Constants

logger = logging.getLogger(__name__)

MANIFEST_PATH = "META-INF/MANIFEST.MF"
_VERSION_HEADERS = ("Bundle-Version", "Implementation-Version")
_JAR_REF_RE = re.compile(r"""["']?([^\s"'=]+\.jar)["']?""")


def _jar_from_launcher(launcher: str) -> Optional[str]:
    """Follow a launcher script to the jar it starts, or None."""
    if zipfile.is_zipfile(launcher):
        return launcher
    try:
        with open(launcher, "r", encoding="utf-8", errors="replace") as fh:
            text = fh.read()
    except OSError as exc:
        logger.debug("Could not read launcher %s: %s", launcher, exc)
        return None
    for match in _JAR_REF_RE.finditer(text):
        candidate = os.path.expanduser(os.path.expandvars(match.group(1)))
        if os.path.isfile(candidate):
            return os.path.realpath(candidate)
    return None


def local_binary_path(settings: UpdateSettings, which=None) -> Optional[str]:
    """Path of the installed blade jar, or None when it cannot be located.

    A configured ``binary_path`` wins; otherwise the ``blade`` launcher on
    PATH is followed to the jar it runs.
    """
    if settings.binary_path:
        return settings.binary_path
    launcher = (which or shutil.which)(Constants.BLADE_COMMAND)
    if not launcher:
        logger.debug("No %s launcher found on PATH", Constants.BLADE_COMMAND)
        return None
    return _jar_from_launcher(os.path.realpath(launcher))


def _parse_manifest(text: str) -> dict:
    """Parse a jar manifest, joining continuation lines (leading space)."""
    headers = {}
    last_key = None
    for line in text.splitlines():
        if line.startswith(" ") and last_key:
            headers[last_key] += line[1:]
            continue
        if ":" not in line:
            last_key = None
            continue
        key, value = line.split(":", 1)
        last_key = key.strip()
        headers[last_key] = value.strip()
    return headers


def read_manifest_version(jar_path: str) -> Optional[str]:
    """Return the version recorded in the jar manifest, or None."""
    try:
        with zipfile.ZipFile(jar_path) as jar:
            text = jar.read(MANIFEST_PATH).decode("utf-8", errors="replace")
    except (OSError, KeyError, zipfile.BadZipFile) as exc:
        logger.debug("Could not read manifest from %s: %s", jar_path, exc)
        return None
    headers = _parse_manifest(text)
    for header in _VERSION_HEADERS:
        if headers.get(header):
            return headers[header]
    return None


def current_version(settings: UpdateSettings) -> str:
    """Version of the running tool: configured value first, then the jar manifest.

    Raises:
        MalformedVersion: When no version can be determined.
    """
    if settings.current_version:
        return settings.current_version
    path = local_binary_path(settings)
    if not path:
        raise MalformedVersion(
            None,
            "Could not locate the blade jar. Pass --binary or set binary_path in the config.",
        )
    version = read_manifest_version(path)
    if not version:
        raise MalformedVersion(None, "Could not determine current blade version.")
    return version
