"""Shared HTTP helpers used by the metadata client and integrity verifier.

Encapsulates request/timeout error handling so callers avoid duplicating
try/except blocks. Failures are raised as ``RepositoryUnreachable`` and
left for the command boundary to report.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from constants import Constants
from common.errors import RepositoryUnreachable
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def safe_get(url: str, *, context: str, timeout: Optional[float] = None, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "release", "md5").
        timeout: Seconds before giving up; defaults to Constants.REQUEST_TIMEOUT.
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object.

    Raises:
        RepositoryUnreachable: On timeouts and connection errors.
    """
    safe_target = safe_url(url)
    headers = kwargs.pop("headers", None) or {}
    headers.setdefault("User-Agent", Constants.USER_AGENT)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.get(
                url,
                timeout=timeout if timeout is not None else Constants.REQUEST_TIMEOUT,
                headers=headers,
                **kwargs
            )
        except requests.Timeout as exc:
            logger.debug("%s request timed out after %s seconds", context, Constants.REQUEST_TIMEOUT)
            raise RepositoryUnreachable(url, details="timed out") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.debug("%s connection error: %s", context, exc)
            raise RepositoryUnreachable(url, details=str(exc)) from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success" if res.status_code == 200 else "non_200",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def fetch_text(url: str, *, context: str, **kwargs: Any) -> str:
    """GET ``url`` and return its body, raising unless the status is 200.

    Raises:
        RepositoryUnreachable: On transport failure or a non-200 status.
    """
    res = safe_get(url, context=context, **kwargs)
    if res.status_code != 200:
        raise RepositoryUnreachable(url, status_code=res.status_code)
    return res.text
