"""Tests for the FeaturedImage entity and its value objects."""

from __future__ import annotations

import pytest

from wp_autopublisher.constants.status import IMAGE_TRANSITIONS, ImageStatus
from wp_autopublisher.domain.errors import InvalidStateTransition, InvariantViolation, ValidationError
from wp_autopublisher.domain.featured_image import FeaturedImage, ImageAltText, ImageFilename


@pytest.fixture
def image() -> FeaturedImage:
    return FeaturedImage.create(
        article_id="article-1",
        ai_prompt="A cartoon lighthouse at dusk",
        filename="lighthouse.png",
        alt_text="Lighthouse at dusk",
    )


class TestImageFilename:
    """Tests for filename sanitization."""

    def test_illegal_characters_replaced(self):
        assert ImageFilename.create("my photo (1).png").value == "my_photo_1_.png"

    def test_runs_collapsed_and_edges_trimmed(self):
        assert ImageFilename.create("__a   b__").value == "a_b.jpg"

    def test_extension_added(self):
        assert ImageFilename.create("summit").value == "summit.jpg"

    def test_long_name_truncated_keeps_extension(self):
        name = ImageFilename.create("x" * 300 + ".webp").value

        assert len(name) == 255
        assert name.endswith(".webp")

    @pytest.mark.parametrize("raw", ["", "   ", "!!!"])
    def test_unusable(self, raw):
        with pytest.raises(ValidationError):
            ImageFilename.create(raw)


class TestImageAltText:
    """Tests for alt text validation."""

    def test_trimmed(self):
        assert ImageAltText.create("  A harbour  ").value == "A harbour"

    def test_empty(self):
        with pytest.raises(ValidationError):
            ImageAltText.create(" ")

    def test_too_long(self):
        with pytest.raises(ValidationError):
            ImageAltText.create("a" * 251)


class TestLifecycle:
    """Tests for status transitions and the status/URL invariant."""

    def test_created_pending_without_url(self, image):
        assert image.status == ImageStatus.PENDING
        assert image.url is None

    def test_happy_path(self, image):
        """pending -> searching -> found -> uploaded."""
        image.mark_as_searching("lighthouse dusk")
        assert image.status == ImageStatus.SEARCHING
        assert image.search_query == "lighthouse dusk"

        image.mark_as_found("https://images.example.com/tmp.png")
        assert image.is_ready_for_upload()

        image.mark_as_uploaded(42, "https://blog.example.com/wp-content/uploads/lighthouse.png")
        assert image.is_uploaded()
        assert image.media_id == 42
        assert image.url.startswith("https://blog.example.com")

    def test_failure_clears_url(self, image):
        image.mark_as_searching("q")
        image.mark_as_found("https://images.example.com/tmp.png")

        image.mark_as_failed("expired")

        assert image.status == ImageStatus.FAILED
        assert image.url is None
        assert image.error_message == "expired"

    def test_failed_is_final(self, image):
        """A failed image cannot start a new search; a new image is created instead."""
        image.mark_as_searching("q")
        image.mark_as_failed("nothing")

        with pytest.raises(InvalidStateTransition):
            image.mark_as_searching("q2")

        assert image.status == ImageStatus.FAILED
        assert image.search_query == "q"
        assert image.error_message == "nothing"

    @pytest.mark.parametrize("status", list(ImageStatus))
    def test_terminal_statuses_have_no_exits(self, status):
        assert status.is_terminal() == (not IMAGE_TRANSITIONS[status])

    def test_uploaded_is_final(self, image):
        image.mark_as_found("https://images.example.com/tmp.png")
        image.mark_as_uploaded(1, "https://blog.example.com/a.png")

        with pytest.raises(InvalidStateTransition):
            image.mark_as_failed("late")

    def test_cannot_upload_from_pending(self, image):
        with pytest.raises(InvalidStateTransition):
            image.mark_as_uploaded(1, "https://blog.example.com/a.png")

    def test_found_requires_url(self, image):
        with pytest.raises(ValidationError):
            image.mark_as_found("  ")
        assert image.status == ImageStatus.PENDING


class TestPersistence:
    """Tests for to_dict/from_dict."""

    def test_round_trip_keeps_state(self, image):
        image.mark_as_searching("lighthouse")
        image.mark_as_found("https://images.example.com/tmp.png")

        restored = FeaturedImage.from_dict(image.to_dict())

        assert restored.to_dict() == image.to_dict()

    def test_reconstitute_checks_invariant(self, image):
        data = image.to_dict()
        data["status"] = "found"
        data["url"] = None

        with pytest.raises(InvariantViolation):
            FeaturedImage.from_dict(data)
