"""Shared HTTP helpers used by the download cache and repository index.

Encapsulates retry, timeout and streaming-to-disk handling so callers only
deal with a status code and the file that landed on disk. This module is
dependency-light and can be imported from util/* and repository/* without
cycles.
"""
from __future__ import annotations

import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import unquote, urlsplit

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

# (status_code, response_headers, error_message)
DownloadResult = Tuple[int, Dict[str, str], Optional[str]]


def _write_atomically(destination: Path, chunks) -> None:
    """Stream ``chunks`` into a sibling temp file then move it over ``destination``."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", dir=destination.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            for chunk in chunks:
                if chunk:
                    fh.write(chunk)
        os.replace(tmp_name, destination)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _copy_local(url: str, destination: Path) -> DownloadResult:
    """Serve ``file://`` URIs straight from the local filesystem."""
    source = Path(unquote(urlsplit(url).path))
    if not source.is_file():
        return 404, {}, f"{source} does not exist"
    with open(source, "rb") as fh:
        _write_atomically(destination, iter(lambda: fh.read(Constants.DOWNLOAD_CHUNK_SIZE), b""))
    return 200, {}, None


def robust_download(
    url: str,
    destination: Path,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> DownloadResult:
    """GET ``url`` into ``destination`` with timeout and retries, with DEBUG traces.

    A 200 response replaces ``destination`` atomically. Any other status
    leaves ``destination`` untouched; callers decide what 304 or 404 mean.

    Args:
        url: Source URL (http, https or file).
        destination: Where the body is written on success.
        headers: Extra request headers (e.g. conditional-GET validators).
        **kwargs: Additional requests.get parameters.

    Returns:
        Tuple of (status_code, headers_dict, error_message). ``status_code``
        is 0 when every attempt failed at the transport level.
    """
    safe_target = safe_url(url)
    if urlsplit(url).scheme == "file":
        try:
            return _copy_local(url, destination)
        except OSError as exc:
            return 0, {}, str(exc)

    request_headers = {"User-Agent": Constants.USER_AGENT}
    request_headers.update(headers or {})
    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=request_headers,
                    stream=True,
                    **kwargs
                )
                try:
                    if response.status_code >= 500:
                        last_exception = f"HTTP {response.status_code}"
                        continue
                    if response.status_code == 200:
                        _write_atomically(
                            destination,
                            response.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE),
                        )

                    if is_debug_enabled(logger):
                        logger.debug(
                            "HTTP response ok",
                            extra=extra_context(
                                event="http_response",
                                component="http_client",
                                action="GET",
                                outcome="success",
                                status_code=response.status_code,
                                duration_ms=t.duration_ms(),
                                target=safe_target
                            )
                        )
                    return response.status_code, dict(response.headers), None
                finally:
                    response.close()

            except requests.Timeout:
                last_exception = "timeout"
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP timeout",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="timeout",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                continue
            except requests.RequestException as exc:
                last_exception = str(exc)
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request exception",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="request_exception",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                continue

    # All retries failed
    return 0, {}, f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"

