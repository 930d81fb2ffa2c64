"""Compare the local binary against a repository-published MD5 checksum."""
from __future__ import annotations

import hashlib
import logging
from typing import Callable, Optional

from common import http_client
from common.logging_utils import extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


def md5_of_file(path: str) -> str:
    """Return the upper-case hex MD5 digest of the file at ``path``."""
    digest = hashlib.md5()  # nosec B324 - matches the repository's .md5 sidecars
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest().upper()


class IntegrityVerifier:
    """Decides whether the local binary already is a published artifact.

    Any failure counts as "no match" so a broken checksum never blocks an
    update.
    """

    def __init__(self, fetch: Optional[Callable[..., str]] = None):
        self._fetch = fetch or http_client.fetch_text

    def matches(self, local_binary_path: Optional[str], md5_url: str) -> bool:
        if not local_binary_path:
            return False
        try:
            remote = self._fetch(md5_url, context="md5").strip()
            # Some repositories append the file name after the digest.
            remote_digest = remote.split()[0] if remote else ""
            local_digest = md5_of_file(local_binary_path)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            if is_debug_enabled(logger):
                logger.debug(
                    "Integrity check failed, treating as no match",
                    extra=extra_context(
                        event="anomaly",
                        component="integrity",
                        action="matches",
                        outcome="error",
                        target=safe_url(md5_url),
                        error=str(exc)
                    )
                )
            return False
        matched = bool(remote_digest) and remote_digest.upper() == local_digest
        if is_debug_enabled(logger):
            logger.debug(
                "Integrity check",
                extra=extra_context(
                    event="decision",
                    component="integrity",
                    action="matches",
                    outcome="match" if matched else "mismatch",
                    target=safe_url(md5_url)
                )
            )
        return matched


def matches(local_binary_path: Optional[str], md5_url: str, fetch: Optional[Callable[..., str]] = None) -> bool:
    """Module-level shortcut for ``IntegrityVerifier(fetch).matches``."""
    return IntegrityVerifier(fetch).matches(local_binary_path, md5_url)
