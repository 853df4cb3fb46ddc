from typing import List, Optional
from urllib.parse import quote

import httpx
import structlog
from pydantic import TypeAdapter

from inliner.connections.http_transport import HttpTransport
from inliner.core.config import InlinerSettings, get_settings
from inliner.domain.models import (
    ContentItem,
    EditRequest,
    GenerationRequest,
    ImageFormat,
    ImageResult,
    ImageSource,
    Project,
    ProjectCreated,
    ProjectList,
    RenameRequest,
    SearchOptions,
    SuccessResponse,
    TagChange,
    TagWithCount,
    UploadOptions,
    UploadResult,
)
from inliner.services.asset_workflow import AssetWorkflow
from inliner.services.slugs import slugify

logger = structlog.get_logger()

_content_items = TypeAdapter(List[ContentItem])
_tag_counts = TypeAdapter(List[TagWithCount])


class InlinerClient:
    """
    Typed async client for the Inliner image API.

    Generation and edits wait until the image is ready and return its bytes;
    everything else is a single request mapped onto a response record.

        async with InlinerClient(api_key="...") as client:
            result = await client.generate_image("my-site", "a red fox in snow", 800, 600)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        image_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        settings: Optional[InlinerSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        settings = settings or get_settings()
        api_key = api_key or settings.API_KEY
        if not api_key:
            raise ValueError("An API key is required (pass api_key or set INLINER_API_KEY)")

        self.transport = HttpTransport(
            api_key=api_key,
            api_url=api_url or settings.API_URL,
            image_url=image_url or settings.IMAGE_URL,
            timeout=settings.REQUEST_TIMEOUT,
            client=http_client,
        )
        self.workflow = AssetWorkflow(
            self.transport,
            timeout_seconds=timeout_seconds if timeout_seconds is not None else settings.POLL_TIMEOUT,
        )

    async def aclose(self):
        await self.transport.aclose()

    async def __aenter__(self) -> "InlinerClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # --- Generation & Edits ---

    async def generate_image(
        self,
        project: str,
        prompt: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        format: ImageFormat = "png",
        smart_url: bool = True,
    ) -> ImageResult:
        request = GenerationRequest(
            project=project,
            prompt=prompt,
            width=width,
            height=height,
            format=format,
            smart_url_enabled=smart_url,
        )
        return await self.workflow.generate(request)

    async def edit_image(
        self,
        source,
        instruction: str,
        project: Optional[str] = None,
        format: ImageFormat = "png",
        width: Optional[int] = None,
        height: Optional[int] = None,
        filename: Optional[str] = None,
    ) -> ImageResult:
        """
        Edit an image given either its URL or its binary content.
        Binary content is uploaded into `project` first (required in that case).
        The edit becomes a new image nested under the source's path.
        """
        request = EditRequest(
            source=source,
            instruction=instruction,
            project=project,
            format=format,
            width=width,
            height=height,
            filename=filename,
        )
        return await self.workflow.edit(request)

    # --- Upload ---

    async def upload_image(self, file: ImageSource, filename: str, options: UploadOptions) -> UploadResult:
        """
        Upload an image file.

        Title, description and tags are generated server-side for every field
        left unset in `options`. The slug defaults to one derived from `filename`.
        """
        return await self.workflow.upload(file, filename, options)

    # --- Tagging ---

    async def get_all_tags(self) -> List[TagWithCount]:
        return _tag_counts.validate_python(await self.transport.json_call("content/tags"))

    async def add_tags(self, content_ids: List[str], tags: List[str]) -> SuccessResponse:
        return await self._tag_call("content/tags", content_ids, tags)

    async def remove_tags(self, content_ids: List[str], tags: List[str]) -> SuccessResponse:
        return await self._tag_call("content/tags/remove", content_ids, tags)

    async def replace_tags(self, content_ids: List[str], tags: List[str]) -> SuccessResponse:
        return await self._tag_call("content/tags/replace", content_ids, tags)

    async def _tag_call(self, path: str, content_ids: List[str], tags: List[str]) -> SuccessResponse:
        body = TagChange(content_ids=content_ids, tags=tags).model_dump(by_alias=True)
        return SuccessResponse.model_validate(await self.transport.json_call(path, "POST", body))

    async def get_images_by_tag(self, tag: str) -> List[ContentItem]:
        raw = await self.transport.json_call(f"content/tags/{quote(tag, safe='')}")
        return _content_items.validate_python(raw)

    # --- Content ---

    async def search(self, options: SearchOptions) -> List[ContentItem]:
        """Search with expressions, e.g. "tags:lion AND tags:snow"."""
        raw = await self.transport.json_call("content/search", "POST", options.model_dump(exclude_none=True))
        return _content_items.validate_python(raw)

    async def list_images(self, project_id: Optional[str] = None, limit: Optional[int] = None) -> List[ContentItem]:
        params = {}
        if project_id:
            params["projectId"] = project_id
        if limit:
            params["limit"] = str(limit)
        raw = await self.transport.json_call("content/images", params=params or None)
        return _content_items.validate_python(raw)

    async def delete_content(self, content_id: str) -> SuccessResponse:
        raw = await self.transport.json_call(f"content/{quote(content_id, safe='')}", "DELETE")
        return SuccessResponse.model_validate(raw)

    async def rename_content(self, content_id: str, slug: str) -> SuccessResponse:
        body = RenameRequest(content_id=content_id, slug=slug).model_dump(by_alias=True)
        return SuccessResponse.model_validate(await self.transport.json_call("content/rename", "POST", body))

    # --- Projects ---

    async def list_projects(self) -> ProjectList:
        return ProjectList.model_validate(await self.transport.json_call("account/projects"))

    async def get_project_details(self, project_id: str) -> Project:
        raw = await self.transport.json_call(f"account/projects/{quote(project_id, safe='')}")
        return Project.model_validate(raw)

    async def create_project(self, project: Project) -> ProjectCreated:
        body = project.model_dump(by_alias=True, exclude_none=True)
        raw = await self.transport.json_call("account/projects", "POST", body)
        logger.info("project_created", project=project.project)
        return ProjectCreated.model_validate(raw)

    # --- URL Helpers ---

    def build_image_url(
        self, project: str, description: str, width: int, height: int, format: ImageFormat = "png"
    ) -> str:
        """URL that generates (or serves) an image on first request."""
        return self.transport.image(f"{project}/{slugify(description)}_{width}x{height}.{format}")
