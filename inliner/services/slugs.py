import re
from typing import Optional

MAX_SLUG_LENGTH = 100

_NON_SLUG = re.compile(r"[^a-z0-9-]+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_HYPHENS = re.compile(r"-{2,}")


def _finish(slug: str) -> str:
    # Trim first, cut, then trim again in case the cut lands on a hyphen
    return slug.strip("-")[:MAX_SLUG_LENGTH].rstrip("-")


def slugify(text: str) -> str:
    """
    Normalizes free text (prompts, edit instructions) into a URL-safe token.
    May return an empty string.
    """
    slug = _NON_SLUG.sub("-", text.lower())
    return _finish(_HYPHENS.sub("-", slug))


def slugify_filename(name: str) -> str:
    """
    Like `slugify` but drops the last extension first and never returns empty.
    """
    stem = name.rsplit(".", 1)[0] if "." in name else name
    slug = _finish(_NON_ALNUM.sub("-", stem.lower()))
    return slug or "image"


def dimensions_suffix(width: Optional[int], height: Optional[int]) -> str:
    if width and height:
        return f"_{width}x{height}"
    return ""


def content_path(
    project: str,
    slug: str,
    format: str,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> str:
    """`{project}/{slug}[_{w}x{h}].{format}` - the key shared by submit and poll."""
    return f"{project}/{slug}{dimensions_suffix(width, height)}.{format}"
