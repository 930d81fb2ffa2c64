"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

import yaml


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    METADATA_ERROR = 3
    VERSION_ERROR = 4
    INSTALL_ERROR = 5


class Channel(Enum):
    """Update channels published by the artifact repository.

    Args:
        Enum (string): Channel name as shown to the operator.
    """

    RELEASE = "release"
    SNAPSHOT = "snapshot"


class LatestSelection(Enum):
    """Strategy used to pick the latest entry of a version index."""

    DOCUMENT_ORDER = "document"
    SEMANTIC = "semantic"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    BASE_CDN_URL = "https://repository-cdn.liferay.com/nexus/content/repositories/"
    BLADE_CLI_CONTEXT = "com/liferay/blade/com.liferay.blade.cli/"
    RELEASES_REPO_URL = BASE_CDN_URL + "liferay-public-releases/" + BLADE_CLI_CONTEXT
    SNAPSHOTS_REPO_URL = BASE_CDN_URL + "liferay-public-snapshots/" + BLADE_CLI_CONTEXT
    ARTIFACT_ID = "com.liferay.blade.cli"
    METADATA_FILE = "maven-metadata.xml"
    SNAPSHOT_MARKER = "SNAPSHOT"

    BLADE_COMMAND = "blade"
    INSTALL_COMMAND = ["jpm", "install", "-f"]
    UPDATE_URL_FILE = os.path.join(os.path.expanduser("~"), ".blade", "update.url")
    LATEST_SELECTION = LatestSelection.DOCUMENT_ORDER.value

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "BLADE_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "blade-update/1.0"
    CONFIG_SECTION = "update"


logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_LOCATIONS = (
    os.path.join(os.getcwd(), ".blade-update.yml"),
    os.path.join(os.path.expanduser("~"), ".blade", "update.yml"),
    os.path.join(
        os.environ.get("XDG_CONFIG_HOME", os.path.join(os.path.expanduser("~"), ".config")),
        "blade",
        "update.yml",
    ),
)


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the ``update`` section of a YAML config file.

    An explicit path is read as-is; otherwise the first existing default
    location wins. Returns an empty dict when nothing usable is found.
    """
    candidates = [path] if path else list(_DEFAULT_CONFIG_LOCATIONS)
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to load config %s: %s", candidate, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        section = data.get(Constants.CONFIG_SECTION, data)
        return section if isinstance(section, dict) else {}
    if path:
        logger.warning("Config file not found: %s", path)
    return {}
