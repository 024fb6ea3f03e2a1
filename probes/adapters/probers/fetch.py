"""
Fetch helpers - Bounded reading of HTTP response bodies.
"""

import logging

import requests

from probes.core.errors import ReadLimitError

logger = logging.getLogger(__name__)

MAX_RESPONSE_BYTES = 1_000_000  # largest response size accepted
DEFAULT_TIMEOUT = 30.0  # seconds, per request
CHUNK_SIZE = 64 * 1024


def read_limited(response: requests.Response, limit: int = MAX_RESPONSE_BYTES) -> bytes:
    """
    Read at most limit bytes of the response body.

    Bodies longer than the limit are truncated; the rest is never read.

    Args:
        response: Response opened with stream=True
        limit: Maximum number of bytes to read

    Returns:
        The (possibly truncated) body

    Raises:
        ReadLimitError: If the body cannot be read
    """
    buf = bytearray()
    try:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            buf.extend(chunk)
            if len(buf) >= limit:
                logger.debug(
                    "Response from %s truncated at %d bytes", response.url, limit
                )
                break
    except (requests.RequestException, OSError) as e:
        raise ReadLimitError(f"failed to read HTTP response: {e}") from e
    return bytes(buf[:limit])
