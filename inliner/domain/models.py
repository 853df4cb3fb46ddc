from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ImageFormat = Literal["png", "jpg"]

# Binary content accepted at the API boundary: raw bytes (named by a separate
# filename), an open binary file object, or a path on disk.
ImageSource = Union[bytes, bytearray, BinaryIO, Path]


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---


class GenerationRequest(WireModel):
    model_config = ConfigDict(frozen=True)

    project: str
    prompt: str = Field(..., min_length=1)
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    format: ImageFormat = "png"
    smart_url_enabled: bool = True


@dataclass(frozen=True)
class EditRequest:
    """
    `source` is either the URL of an existing asset or binary content to
    upload first. The source kind decides the resolution path.
    """

    source: Union[str, ImageSource]
    instruction: str
    project: Optional[str] = None  # required when source is binary
    format: ImageFormat = "png"
    width: Optional[int] = None
    height: Optional[int] = None
    filename: Optional[str] = None  # used to name an uploaded binary source

    @property
    def is_url(self) -> bool:
        return isinstance(self.source, str)


class RecommendRequest(WireModel):
    prompt: str
    project: str
    width: Optional[int] = None
    height: Optional[int] = None
    format: ImageFormat = "png"


class GenerateSubmission(WireModel):
    prompt: str
    project: str
    slug: str
    width: Optional[int] = None
    height: Optional[int] = None
    format: ImageFormat = "png"


class UploadOptions(WireModel):
    project: str
    slug: Optional[str] = None  # derived from filename if omitted
    title: Optional[str] = None  # omitted fields are AI-generated server-side
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    collection_id: Optional[str] = None


class SearchOptions(BaseModel):
    # The search endpoint takes snake_case keys as-is
    expression: str
    sort_by: Optional[str] = None
    direction: Optional[Literal["asc", "desc"]] = None
    max_results: Optional[int] = None


class TagChange(WireModel):
    content_ids: List[str]
    tags: List[str]


class RenameRequest(WireModel):
    content_id: str
    slug: str


# --- Responses ---


class RecommendResponse(WireModel):
    slug: Optional[str] = None


class GenerateResponse(WireModel):
    content_path: Optional[str] = None
    data: Optional[str] = None  # inline data URI when the asset is ready at once


class StatusResponse(WireModel):
    data: Optional[str] = None


class UploadedContent(WireModel):
    content_id: str
    prompt: Optional[str] = None
    content_path: Optional[str] = None
    original_requested_url: Optional[str] = None
    media_asset_id: Optional[str] = None
    thumbnail_asset_id: Optional[str] = None
    assigned_collection_id: Optional[str] = None


class UploadResult(WireModel):
    success: bool
    message: str = ""
    content: UploadedContent


class SuccessResponse(WireModel):
    success: bool


class TagWithCount(WireModel):
    tag: str
    count: int


class ContentItem(WireModel):
    """Listing/search row. Unknown server fields are kept as extras."""

    model_config = ConfigDict(extra="allow")

    content_id: Optional[str] = None
    prompt: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class Project(WireModel):
    project: str
    display_name: str
    description: Optional[str] = None
    is_default: Optional[bool] = None


class ProjectList(WireModel):
    projects: List[Project] = Field(default_factory=list)


class ProjectCreated(WireModel):
    success: bool
    project: Project


# --- Results ---


@dataclass
class ImageResult:
    data: bytes
    url: str
    content_path: str
    content_type: Optional[str] = None
