import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

UPSTREAM_NAME = "scoring service"


class UpstreamError(RuntimeError):
    """Relay failure; ``step`` is one of "create", "send", "read"."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(message)
        self.step = step


class UpstreamTimeout(UpstreamError):
    pass


@dataclass
class RelayedResponse:
    status_code: int
    content: bytes


class UploadRelay:
    """
    Forwards one uploaded file to a fixed upstream as a fresh multipart body
    and hands back the upstream status and body untouched.
    """

    def __init__(
        self,
        upstream_url: str,
        field_name: str = "pdf_file",
        timeout: float | None = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.upstream_url = upstream_url
        self.field_name = field_name
        self.timeout = timeout
        self._transport = transport

    def _build_request(self, client: httpx.AsyncClient, filename: str, content: bytes, content_type: str) -> httpx.Request:
        try:
            return client.build_request(
                "POST",
                self.upstream_url,
                files={self.field_name: (filename, content, content_type)},
            )
        except Exception as e:
            raise UpstreamError("create", f"Could not create request to {UPSTREAM_NAME}: {e}") from e

    async def forward(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> RelayedResponse:
        """Single attempt, no retry. Raises UpstreamError on any transport failure."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            request = self._build_request(client, filename, content, content_type or "application/octet-stream")
            logger.info("Relaying %s (%d bytes) to %s", filename, len(content), self.upstream_url)
            try:
                response = await client.send(request, stream=True)
            except httpx.TimeoutException as e:
                raise UpstreamTimeout("send", f"{UPSTREAM_NAME.capitalize()} timed out after {self.timeout}s") from e
            except httpx.HTTPError as e:
                raise UpstreamError("send", f"Could not send request to {UPSTREAM_NAME}: {e}") from e

            try:
                body = await response.aread()
            except httpx.TimeoutException as e:
                raise UpstreamTimeout("read", f"{UPSTREAM_NAME.capitalize()} timed out after {self.timeout}s") from e
            except (httpx.HTTPError, httpx.StreamError) as e:
                raise UpstreamError("read", f"Could not read response from {UPSTREAM_NAME}: {e}") from e
            finally:
                await response.aclose()

        logger.info("Scoring service answered status=%d bytes=%d", response.status_code, len(body))
        return RelayedResponse(status_code=response.status_code, content=body)
