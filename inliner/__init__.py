from inliner.client import InlinerClient
from inliner.core.exceptions import (
    ApiError,
    InlinerError,
    InvalidPayloadError,
    InvalidSourceError,
    MissingProjectError,
    OperationFailedError,
    OperationTimedOutError,
)
from inliner.core.logging import configure_logging
from inliner.domain.models import (
    ContentItem,
    EditRequest,
    GenerationRequest,
    ImageResult,
    Project,
    SearchOptions,
    UploadOptions,
    UploadResult,
)
from inliner.services.slugs import slugify, slugify_filename

__all__ = [
    "ApiError",
    "ContentItem",
    "EditRequest",
    "GenerationRequest",
    "ImageResult",
    "InlinerClient",
    "InlinerError",
    "InvalidPayloadError",
    "InvalidSourceError",
    "MissingProjectError",
    "OperationFailedError",
    "OperationTimedOutError",
    "Project",
    "SearchOptions",
    "UploadOptions",
    "UploadResult",
    "configure_logging",
    "slugify",
    "slugify_filename",
]
