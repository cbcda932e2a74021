"""
Asynchronous I/O implementation using the httpx library.
"""

import logging
from typing import Dict, Optional

import httpx

from schedsync.lib import error
from schedsync.lib.python_utilities import to_normal_str
from schedsync.protocol.types import DAVRequest, DAVResponse

log = logging.getLogger(__name__)


def _loggable_headers(headers: Dict[str, str]) -> Dict[str, str]:
    return {
        k: ("***" if k.lower() == "authorization" else v) for k, v in headers.items()
    }


class AsyncIO:
    """
    Asynchronous I/O shell using the httpx library.

    This is a thin wrapper that executes DAVRequest objects via HTTP
    and returns DAVResponse objects.  A fresh httpx.AsyncClient is
    opened for every request, nothing is kept between requests.

    Example:
        io = AsyncIO()
        request = protocol.principal_request()
        response = await io.execute(request)
        principal = protocol.parse_principal(response)
    """

    def __init__(
        self,
        timeout: Optional[float] = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the async I/O handler.

        Args:
            timeout: Request timeout in seconds (None for no timeout)
            verify_ssl: Verify SSL certificates
            transport: httpx transport to use, i.e. an httpx.MockTransport
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            verify=self.verify_ssl,
            transport=self.transport,
        )

    async def execute(self, request: DAVRequest) -> DAVResponse:
        """
        Execute a DAVRequest and return DAVResponse.

        Args:
            request: The request to execute

        Returns:
            DAVResponse with status, headers, and body

        Raises:
            NetworkError: the request did not get any HTTP response
        """
        log.debug(
            "sending request - method={0}, url={1}, headers={2}\nbody:\n{3}".format(
                request.method.value,
                request.url,
                _loggable_headers(request.headers),
                to_normal_str(request.body),
            )
        )
        async with self._get_client() as client:
            try:
                r = await client.request(
                    request.method.value,
                    request.url,
                    headers=request.headers,
                    content=request.body,
                )
            except httpx.HTTPError as err:
                raise error.NetworkError(url=request.url, reason=repr(err)) from err
        log.debug("server responded with %i %s" % (r.status_code, r.reason_phrase))
        log.debug("server response body:\n%s", r.text)
        return DAVResponse(
            status=r.status_code,
            headers=dict(r.headers),
            body=r.content,
        )
