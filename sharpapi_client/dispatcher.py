import asyncio
import json
import os
from contextlib import asynccontextmanager
from typing import IO, Any, AsyncIterator, Dict, Mapping, Optional, Union

import aiohttp
from loguru import logger

from sharpapi_client.errors import ConfigurationError, DecodingError, TransportError
from sharpapi_client.models import ClientConfig, DispatchResponse

FilePayload = Union[str, "os.PathLike[str]", IO[bytes]]

FILE_FIELD = "file"


def _form_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_body(payload: Mapping[str, Any], stream: Optional[IO[bytes]] = None) -> Dict[str, Any]:
    """Returns the request keyword arguments carrying payload: JSON, or multipart when a file is attached"""
    if stream is None:
        return {"json": dict(payload)}

    form = aiohttp.FormData()
    name = getattr(stream, "name", None)
    filename = os.path.basename(name) if isinstance(name, str) else FILE_FIELD
    form.add_field(FILE_FIELD, stream, filename=filename)
    for key, value in payload.items():
        form.add_field(key, _form_value(value))
    return {"data": form}


class Dispatcher:
    """Sends single requests to the service. Never retries."""

    def __init__(self, config: ClientConfig):
        if not config.api_key:
            raise ConfigurationError("API key is required.")
        self.config = config
        self.logger = logger
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }

    def url_for(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{endpoint}"

    @asynccontextmanager
    async def session(
        self, session: Optional[aiohttp.ClientSession] = None
    ) -> AsyncIterator[aiohttp.ClientSession]:
        """Yields the given session, or a fresh one closed on exit"""
        if session is not None:
            yield session
            return
        async with aiohttp.ClientSession(timeout=self._timeout) as owned:
            yield owned

    async def submit(
        self,
        endpoint: str,
        payload: Optional[Mapping[str, Any]] = None,
        file: Optional[FilePayload] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> DispatchResponse:
        """POSTs a task submission to endpoint"""
        url = self.url_for(endpoint)
        payload = payload or {}

        if file is None:
            return await self._request("POST", url, session, **build_body(payload))

        if isinstance(file, (str, os.PathLike)):
            with open(file, "rb") as stream:
                return await self._request("POST", url, session, **build_body(payload, stream))

        return await self._request("POST", url, session, **build_body(payload, file))

    async def get(
        self,
        endpoint: str,
        query: Optional[Mapping[str, Any]] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> Any:
        """GETs a synchronous endpoint and returns its decoded body"""
        params = {key: _form_value(value) for key, value in (query or {}).items() if value is not None}
        response = await self._request("GET", self.url_for(endpoint), session, params=params)
        return response.body

    async def fetch(
        self, url: str, session: Optional[aiohttp.ClientSession] = None
    ) -> DispatchResponse:
        """GETs an absolute URL, such as a job status handle"""
        return await self._request("GET", url, session)

    async def _request(
        self,
        method: str,
        url: str,
        session: Optional[aiohttp.ClientSession],
        **kwargs: Any,
    ) -> DispatchResponse:
        self.logger.debug(f"{method} {url}")

        try:
            async with self.session(session) as active:
                async with active.request(
                    method, url, headers=self.headers(), timeout=self._timeout, **kwargs
                ) as response:
                    text = await response.text()
                    if not 200 <= response.status < 300:
                        self.logger.error(f"HTTP error {response.status} at {url}: {text}")
                        raise TransportError(
                            f"HTTP {response.status} from {url}",
                            status=response.status,
                            body=text,
                            url=url,
                        )
                    status_code = response.status
                    headers = {key.lower(): value for key, value in response.headers.items()}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Request to {url} failed: {e!r}")
            raise TransportError(f"Request to {url} failed: {e!r}", url=url) from e

        return DispatchResponse(
            status_code=status_code, body=self._decode(text, url), headers=headers
        )

    def _decode(self, text: str, url: str) -> Any:
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            self.logger.error(f"Malformed JSON body from {url}: {text[:200]!r}")
            raise DecodingError(f"Malformed JSON body from {url}") from e
