import json
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import aiofiles
import httpx
import structlog

from inliner.core.exceptions import ApiError
from inliner.domain.models import ImageSource

logger = structlog.get_logger()

FormValue = Union[str, List[str]]


def _error_message(response: httpx.Response) -> str:
    body = response.text
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return body


async def resolve_upload_file(file: ImageSource, filename: str) -> Tuple[str, Any, str]:
    """
    Turns any accepted binary source into an httpx `files` tuple.
    Bytes are copied; file objects are streamed as-is.
    """
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

    if isinstance(file, (bytes, bytearray)):
        return filename, bytes(file), content_type
    if isinstance(file, Path):
        async with aiofiles.open(file, "rb") as f:
            return filename, await f.read(), content_type
    return filename, file, content_type


class HttpTransport:
    """
    Authenticated access to the JSON API and the image CDN.
    One pooled httpx client per transport; close it with `aclose()`.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        image_url: str,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.image_url = image_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {api_key}"}
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def api(self, path: str) -> str:
        return f"{self.api_url}/{path.lstrip('/')}"

    def image(self, content_path: str) -> str:
        return f"{self.image_url}/{content_path.lstrip('/')}"

    async def json_call(
        self,
        path: str,
        method: str = "GET",
        body: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        resp = await self._client.request(
            method,
            self.api(path),
            json=body,
            params=params,
            headers={**self._headers, "Content-Type": "application/json"},
        )
        return self._parse(resp)

    async def form_call(
        self,
        path: str,
        fields: Dict[str, FormValue],
        file: ImageSource,
        filename: str,
    ) -> Any:
        upload = await resolve_upload_file(file, filename)
        resp = await self._client.post(
            self.api(path),
            data=fields,
            files={"file": upload},
            headers=self._headers,
        )
        return self._parse(resp)

    async def get(self, path: str) -> httpx.Response:
        """Raw GET on the API; the caller inspects the status."""
        return await self._client.get(self.api(path), headers=self._headers)

    async def fetch_binary(self, content_path: str) -> httpx.Response:
        """Raw GET on the CDN."""
        return await self._client.get(self.image(content_path), headers=self._headers)

    def _parse(self, resp: httpx.Response) -> Any:
        if not resp.is_success:
            message = _error_message(resp)
            logger.warning("api_request_failed", url=str(resp.request.url), status=resp.status_code)
            raise ApiError(resp.status_code, message)
        return resp.json()

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
