import asyncio
import math
import time
from typing import Any, Optional, Type, TypeVar
from urllib.parse import urlparse

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from inliner.connections.http_transport import HttpTransport
from inliner.core.exceptions import (
    ApiError,
    InvalidPayloadError,
    InvalidSourceError,
    MissingProjectError,
    OperationFailedError,
    OperationTimedOutError,
)
from inliner.core.telemetry import tracer
from inliner.domain.interfaces import ImageGenerator
from inliner.domain.models import (
    EditRequest,
    GenerateResponse,
    GenerateSubmission,
    GenerationRequest,
    ImageResult,
    ImageSource,
    RecommendRequest,
    RecommendResponse,
    StatusResponse,
    UploadOptions,
    UploadResult,
)
from inliner.services.data_uri import decode_data_uri
from inliner.services.slugs import content_path, dimensions_suffix, slugify, slugify_filename

logger = structlog.get_logger()

POLL_INTERVAL_SECONDS = 3
DEFAULT_TIMEOUT_SECONDS = 180

Reply = TypeVar("Reply", bound=BaseModel)


def parse_reply(model: Type[Reply], raw: Any) -> Reply:
    """Validates a JSON reply; shape mismatches surface as InvalidPayloadError."""
    try:
        return model.model_validate(raw or {})
    except ValidationError as e:
        raise InvalidPayloadError(f"Unexpected {model.__name__} payload", original_error=e)


def upload_slug() -> str:
    return f"edit-source-{int(time.time() * 1000)}"


def base_path_from_url(source: str) -> str:
    """Path component of an asset URL, without the leading slash."""
    try:
        parsed = urlparse(source)
    except ValueError as e:
        raise InvalidSourceError(source) from e
    path = parsed.path.lstrip("/")
    if parsed.scheme not in ("http", "https") or not parsed.netloc or not path:
        raise InvalidSourceError(source)
    return path


def edit_content_path(
    base_path: str,
    instruction: str,
    format: str,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> str:
    """Edits nest under the source asset's path; the source itself is never touched."""
    return f"{base_path}/{slugify(instruction)}{dimensions_suffix(width, height)}.{format}"


class AssetWorkflow(ImageGenerator):
    """
    Resolves generate / edit requests into finished images.
    Every entry point ends in `poll`, which waits on one ContentPath
    until the server reports it ready, fails, or the budget runs out.
    """

    def __init__(self, transport: HttpTransport, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.transport = transport
        self.timeout_seconds = timeout_seconds

    # --- Generate ---

    async def generate(self, request: GenerationRequest) -> ImageResult:
        with tracer.start_as_current_span("inliner.generate") as span:
            span.set_attribute("inliner.project", request.project)

            if not request.smart_url_enabled:
                path = content_path(
                    request.project, slugify(request.prompt), request.format, request.width, request.height
                )
                logger.info("generation_polling_direct", content_path=path)
                return await self.poll(path, "Generating", self.timeout_seconds)

            # 1. Ask the server for a slug
            slug = await self._recommend_slug(request)

            # 2. Submit
            submission = GenerateSubmission(
                prompt=request.prompt,
                project=request.project,
                slug=slug,
                width=request.width,
                height=request.height,
                format=request.format,
            )
            raw = await self.transport.json_call(
                "content/generate", "POST", submission.model_dump(by_alias=True, exclude_none=True)
            )
            response = parse_reply(GenerateResponse, raw)

            # 3. Path is fixed from here on
            path = (response.content_path or "").lstrip("/") or content_path(
                request.project, slug, request.format, request.width, request.height
            )
            logger.info("generation_submitted", content_path=path, slug=slug)

            # 4. Ready at once?
            if response.data:
                return self._from_data_uri(response.data, path)

            return await self.poll(path, "Generating", self.timeout_seconds)

    async def _recommend_slug(self, request: GenerationRequest) -> str:
        body = RecommendRequest(
            prompt=request.prompt,
            project=request.project,
            width=request.width,
            height=request.height,
            format=request.format,
        )
        try:
            raw = await self.transport.json_call(
                "url/recommend", "POST", body.model_dump(by_alias=True, exclude_none=True)
            )
            recommended = RecommendResponse.model_validate(raw or {}).slug
        except (ApiError, httpx.HTTPError, ValueError) as e:
            logger.warning("slug_recommendation_failed", error=str(e))
            recommended = None

        if recommended and recommended.strip():
            return recommended.strip()
        return slugify(request.prompt)

    # --- Edit ---

    async def edit(self, request: EditRequest) -> ImageResult:
        if request.is_url:
            return await self.edit_by_url(request)
        return await self.edit_by_upload(request)

    async def edit_by_url(self, request: EditRequest) -> ImageResult:
        base_path = base_path_from_url(request.source)
        return await self._edit_from(base_path, request)

    async def edit_by_upload(self, request: EditRequest) -> ImageResult:
        if not request.project:
            raise MissingProjectError()

        filename = request.filename or f"upload.{request.format}"
        slug = upload_slug()
        result = await self.upload(request.source, filename, UploadOptions(project=request.project, slug=slug))

        base_path = self._uploaded_path(result, request.project, slug, filename)
        logger.info("edit_source_uploaded", content_id=result.content.content_id, content_path=base_path)
        return await self._edit_from(base_path, request)

    async def _edit_from(self, base_path: str, request: EditRequest) -> ImageResult:
        with tracer.start_as_current_span("inliner.edit") as span:
            path = edit_content_path(base_path, request.instruction, request.format, request.width, request.height)
            span.set_attribute("inliner.content_path", path)
            logger.info("edit_requested", source_path=base_path, content_path=path)
            return await self.poll(path, "Editing", self.timeout_seconds)

    @staticmethod
    def _uploaded_path(result: UploadResult, project: str, slug: str, filename: str) -> str:
        content = result.content
        if content.content_path:
            return content.content_path.lstrip("/")
        if content.original_requested_url:
            path = urlparse(content.original_requested_url).path.lstrip("/")
            if path:
                return path
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "png"
        return f"{project}/{slug}.{ext}"

    # --- Upload ---

    async def upload(self, file: ImageSource, filename: str, options: UploadOptions) -> UploadResult:
        fields = {
            "project": options.project,
            "prompt": options.slug or slugify_filename(filename),
        }
        if options.collection_id:
            fields["collectionId"] = options.collection_id
        if options.title:
            fields["title"] = options.title
        if options.description:
            fields["description"] = options.description
        if options.tags:
            fields["tags[]"] = list(options.tags)

        logger.info("uploading_image", project=options.project, filename=filename)
        raw = await self.transport.form_call("content/upload", fields, file, filename)
        return parse_reply(UploadResult, raw)

    # --- Poll ---

    async def poll(self, path: str, label: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> ImageResult:
        """
        One status call every POLL_INTERVAL_SECONDS, at most ceil(timeout / interval) calls.
        202 keeps waiting, 200 finishes, anything else is terminal.
        """
        attempts = max(0, math.ceil(timeout_seconds / POLL_INTERVAL_SECONDS))

        with tracer.start_as_current_span("inliner.poll") as span:
            span.set_attribute("inliner.content_path", path)

            for attempt in range(1, attempts + 1):
                resp = await self.transport.get(f"content/request-json/{path}")

                if resp.status_code == 200:
                    result = await self._resolve_ready(resp, path)
                    if result is not None:
                        logger.info("asset_ready", label=label, content_path=path, attempt=attempt)
                        span.set_attribute("inliner.attempts", attempt)
                        return result

                elif resp.status_code != 202:
                    logger.error("asset_failed", label=label, content_path=path, status=resp.status_code)
                    raise OperationFailedError(label, resp.status_code, resp.text)

                logger.debug("asset_processing", label=label, content_path=path, attempt=attempt)
                if attempt < attempts:
                    await asyncio.sleep(POLL_INTERVAL_SECONDS)

            url = self.transport.image(path)
            logger.error("asset_timed_out", label=label, url=url, attempts=attempts)
            raise OperationTimedOutError(label, timeout_seconds, url)

    async def _resolve_ready(self, resp: httpx.Response, path: str) -> Optional[ImageResult]:
        # 1. Embedded payload
        inline = self._inline_data(resp)
        if inline:
            return self._from_data_uri(inline, path)

        # 2. Fetch by path
        cdn = await self.transport.fetch_binary(path)
        if cdn.is_success:
            return ImageResult(
                data=cdn.content,
                url=self.transport.image(path),
                content_path=path,
                content_type=cdn.headers.get("content-type"),
            )
        logger.warning("cdn_fetch_failed", content_path=path, status=cdn.status_code)
        return None

    @staticmethod
    def _inline_data(resp: httpx.Response) -> Optional[str]:
        try:
            raw = resp.json()
        except ValueError:
            return None
        if not isinstance(raw, dict):
            return None
        return parse_reply(StatusResponse, raw).data

    def _from_data_uri(self, value: str, path: str) -> ImageResult:
        data, mime = decode_data_uri(value)
        return ImageResult(data=data, url=self.transport.image(path), content_path=path, content_type=mime)
