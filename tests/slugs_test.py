import re

import pytest

from inliner.services.slugs import content_path, slugify, slugify_filename

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def test_slugify_collapses_runs_and_strips_edges():
    assert slugify("A Cool Título!!") == "a-cool-t-tulo"
    assert slugify("  --Hello,   World--  ") == "hello-world"
    assert slugify("make it sunset") == "make-it-sunset"


def test_slugify_collapses_existing_hyphen_runs():
    assert slugify("red---fox") == "red-fox"


@pytest.mark.parametrize(
    "text",
    ["A Cool Título!!", "a--b", "___", "Ünïcödé ☃ snow", "x" * 250, "-" * 5 + "edge" + "-" * 5, ""],
)
def test_slugify_is_idempotent_and_url_safe(text):
    slug = slugify(text)
    assert slugify(slug) == slug
    assert slug == "" or SLUG_PATTERN.match(slug)
    assert len(slug) <= 100


def test_slugify_truncation_never_leaves_trailing_hyphen():
    # 99 letters then a separator: the cut at 100 lands on the hyphen
    text = "a" * 99 + " tail"
    slug = slugify(text)
    assert slug == "a" * 99
    assert SLUG_PATTERN.match(slug)


def test_slugify_filename_drops_only_last_extension():
    assert slugify_filename("Hero Banner.final.PNG") == "hero-banner-final"
    assert slugify_filename("photo") == "photo"


def test_slugify_filename_treats_hyphen_runs_as_separators():
    assert slugify_filename("my--photo_01.jpg") == "my-photo-01"


@pytest.mark.parametrize("name", [".png", "!!!.jpg", "", "日本語.png"])
def test_slugify_filename_falls_back_to_image(name):
    assert slugify_filename(name) == "image"


def test_content_path_includes_dimensions_only_when_both_set():
    assert content_path("proj", "red-fox", "png", 800, 600) == "proj/red-fox_800x600.png"
    assert content_path("proj", "red-fox", "jpg", 800, None) == "proj/red-fox.jpg"
    assert content_path("proj", "red-fox", "png") == "proj/red-fox.png"
