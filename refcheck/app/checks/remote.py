"""
Remote reference checks.

A remote target is fetched with a single HTTP GET. The response body is
never read: the stream is closed as soon as the status line and headers
arrive. Redirects are followed.

Classification policy:
    status >= 400                    -> HTTP status error
    response headers too large       -> valid
    any other transport error        -> remote fetch error

The oversized-header case is reported as valid because the response is
discarded anyway; the server answered, which is all a reachability check
needs. It is the only transport error treated this way.

Exception handling policy:
    Only httpx.HTTPError, httpx.InvalidURL and ValueError are caught.
    ValueError covers host names httpx cannot encode (IDNAError is a
    UnicodeError). Anything else is a logic error and propagates.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from refcheck.app.config import CheckerConfig
from refcheck.app.schemas.check_result import CheckOutcome, FailureKind
from refcheck.app.utils.concurrency import ConcurrencyLimiter

logger = logging.getLogger(__name__)

USER_AGENT = "refcheck (+reference checker)"

# h11 reports headers exceeding its receive buffer with this message.
_OVERSIZED_HEADER_MARKERS = ("receive buffer too long",)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def build_http_client(config: CheckerConfig) -> httpx.AsyncClient:
    """
    Construct the HTTP client shared by the checks of one batch.

    The connection pool is sized to the limiter capacity so that a request
    holding a limiter slot never waits on the pool.
    """
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=config.request_timeout,
        limits=httpx.Limits(
            max_connections=config.concurrency,
            max_keepalive_connections=config.concurrency,
        ),
        headers={"User-Agent": USER_AGENT},
    )


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def is_oversized_header_error(exc: Exception) -> bool:
    if not isinstance(exc, httpx.RemoteProtocolError):
        return False
    message = str(exc).lower()
    return any(marker in message for marker in _OVERSIZED_HEADER_MARKERS)


def classify_status(status_code: int) -> CheckOutcome:
    if status_code >= 400:
        phrase = httpx.codes.get_reason_phrase(status_code)
        return CheckOutcome.failed(
            FailureKind.HTTP_STATUS_ERROR,
            f"{phrase} (HTTP error {status_code})",
            status_code=status_code,
        )
    return CheckOutcome.ok()


def classify_transport_error(url: str, exc: Exception) -> CheckOutcome:
    if is_oversized_header_error(exc):
        logger.debug("ignoring oversized response headers from %s", url)
        return CheckOutcome.ok()

    logger.warning("fetching %s failed: %s", url, exc)
    return CheckOutcome.failed(
        FailureKind.REMOTE_FETCH_ERROR,
        str(exc) or exc.__class__.__name__,
    )


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------


async def fetch_status(
    client: httpx.AsyncClient,
    url: str,
    timeout: Optional[float],
) -> int:
    """
    GET url and return the final status code without reading the body.
    """
    async with client.stream("GET", url, timeout=timeout) as response:
        return response.status_code


async def check_remote_target(
    client: httpx.AsyncClient,
    url: str,
    *,
    limiter: ConcurrencyLimiter,
    timeout: Optional[float],
) -> CheckOutcome:
    """
    Fetch url while holding one limiter slot and classify the result.

    The slot is released on every exit path, including transport errors.
    """
    async with limiter.slot():
        try:
            status_code = await fetch_status(client, url, timeout)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            return classify_transport_error(url, exc)

    return classify_status(status_code)
