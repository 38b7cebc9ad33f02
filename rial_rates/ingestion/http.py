"""Shared HTTP plumbing for the rate sources."""

from __future__ import annotations

from typing import Any, Mapping

import requests

from rial_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)


class SourceFetchError(RuntimeError):
    """A rate source could not be fetched or its body could not be read."""

    def __init__(
        self,
        message: str,
        *,
        source: str,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.url = url
        self.status_code = status_code


def fetch(
    url: str,
    *,
    source: str,
    headers: Mapping[str, str],
    timeout: float,
    params: Mapping[str, Any] | None = None,
    session: requests.Session | None = None,
) -> requests.Response:
    """GET ``url`` and return the response, raising :class:`SourceFetchError`.

    Transport errors and non-success statuses are both reported as fetch
    failures; no retry is attempted.
    """

    sess = session or requests.Session()
    try:
        response = sess.get(
            url,
            params=dict(params) if params else None,
            headers=dict(headers),
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise SourceFetchError(
            f"{source} request to {url} failed: {exc}", source=source, url=url
        ) from exc
    try:
        response.raise_for_status()
    except requests.HTTPError as exc:
        status = response.status_code
        raise SourceFetchError(
            f"{source} responded with HTTP {status} for {url}",
            source=source,
            url=url,
            status_code=status,
        ) from exc
    LOGGER.debug("Fetched %s (%s bytes) from %s", source, len(response.content or b""), url)
    return response


__all__ = ["SourceFetchError", "fetch"]
