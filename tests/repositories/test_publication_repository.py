"""Tests for the featured image and publication repositories.

Tests cover:
- Insert/update semantics (DUPLICATE, NOT_FOUND)
- Queries by article, status, readiness and retry eligibility
- The JSON file store on disk, including corrupt files and unsafe ids
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from wp_autopublisher.constants.status import PublicationStatus
from wp_autopublisher.core.types import Failure, Success
from wp_autopublisher.domain.featured_image import FeaturedImage
from wp_autopublisher.domain.publication import Publication, PublicationError, PublicationTarget
from wp_autopublisher.repositories import JsonFileRecordStore, json_repositories


def new_image(article_id: str = "article-1") -> FeaturedImage:
    return FeaturedImage.create(
        article_id=article_id, ai_prompt="A lighthouse", filename="lighthouse.png", alt_text="Lighthouse",
    )


def aged(publication: Publication, minutes: int) -> Publication:
    """Copy of ``publication`` created ``minutes`` ago."""
    data = publication.to_dict()
    data["created_at"] = (datetime.now(timezone.utc) - timedelta(minutes=minutes)).isoformat()
    return Publication.reconstitute(data)


@pytest.fixture(params=["memory", "json"])
def repos(request, tmp_path, repositories):
    """Both repository backends."""
    if request.param == "memory":
        return repositories
    return json_repositories(tmp_path / "data")


class TestFeaturedImageRepository:
    """Tests for FeaturedImageRepository."""

    def test_save_and_find(self, repos):
        images, _ = repos
        image = new_image()

        assert isinstance(images.save(image), Success)

        assert images.find_by_id(image.id).value.to_dict() == image.to_dict()
        assert images.find_by_article_id("article-1").value.id == image.id
        assert images.find_by_article_id("other").value is None

    def test_one_image_per_article(self, repos):
        images, _ = repos
        images.save(new_image())

        result = images.save(new_image())

        assert isinstance(result, Failure)
        assert result.code == "DUPLICATE"

    def test_update(self, repos):
        images, _ = repos
        image = new_image()
        images.save(image)
        image.mark_as_found("https://images.example.com/a.png")

        assert isinstance(images.update(image), Success)
        assert images.find_by_id(image.id).value.url == "https://images.example.com/a.png"

    def test_update_unknown(self, repos):
        images, _ = repos

        result = images.update(new_image())

        assert result.code == "NOT_FOUND"

    def test_delete(self, repos):
        images, _ = repos
        image = new_image()
        images.save(image)

        assert images.delete(image.id).value is True
        assert images.delete(image.id).value is False


class TestPublicationRepository:
    """Tests for PublicationRepository."""

    def test_save_twice_is_duplicate(self, repos, make_publication):
        _, publications = repos
        publication = make_publication()
        publications.save(publication)

        result = publications.save(publication)

        assert result.code == "DUPLICATE"

    def test_update_round_trip(self, repos, make_publication):
        _, publications = repos
        publication = make_publication()
        publications.save(publication)
        publication.start()
        publication.complete("101", "https://blog.example.com/?p=101")

        publications.update(publication)

        stored = publications.find_by_id(publication.id).value
        assert stored.status == PublicationStatus.COMPLETED
        assert stored.external_id == "101"
        assert stored.pull_events() == []

    def test_find_by_id_missing(self, repos):
        _, publications = repos

        assert publications.find_by_id("nope").value is None

    def test_find_by_article_and_status(self, repos, make_publication):
        _, publications = repos
        first = make_publication("article-1")
        second = make_publication("article-2")
        second.start()
        publications.save(first)
        publications.save(second)

        assert [p.id for p in publications.find_by_article_id("article-1").value] == [first.id]
        in_progress = publications.find_by_status(PublicationStatus.IN_PROGRESS).value
        assert [p.id for p in in_progress] == [second.id]

    def test_list_all_newest_first(self, repos, make_publication):
        _, publications = repos
        old = aged(make_publication("article-1"), 30)
        new = aged(make_publication("article-2"), 1)
        publications.save(old)
        publications.save(new)

        assert [p.id for p in publications.list_all().value] == [new.id, old.id]

    def test_exists_for_article_and_target(self, repos, make_publication):
        _, publications = repos
        publications.save(make_publication("article-1"))
        other_site = PublicationTarget.wordpress("shop", "https://shop.example.com", "editor", "pw")

        assert publications.exists_for_article_and_target("article-1", make_publication().target).value is True
        assert publications.exists_for_article_and_target("article-1", other_site).value is False
        assert publications.exists_for_article_and_target("article-2", make_publication().target).value is False

    def test_find_ready(self, repos, make_publication, wp_target):
        _, publications = repos
        pending = make_publication("article-1")
        future = Publication.create_scheduled(
            "article-2", wp_target, datetime.now(timezone.utc) + timedelta(hours=1)
        )
        publications.save(pending)
        publications.save(future)

        now_ready = {p.id for p in publications.find_ready().value}
        later_ready = {p.id for p in publications.find_ready(datetime.now(timezone.utc) + timedelta(hours=2)).value}

        assert now_ready == {pending.id}
        assert later_ready == {pending.id, future.id}

    def test_find_retryable(self, repos, make_publication):
        _, publications = repos
        retryable = make_publication("article-1")
        spent = make_publication("article-2", max_retries=0)
        for publication in (retryable, spent):
            publication.start()
            publication.fail(PublicationError(code="PLATFORM_ERROR", message="500", is_retryable=True))
            publications.save(publication)

        assert [p.id for p in publications.find_retryable().value] == [retryable.id]


class TestJsonFileRecordStore:
    """Tests for the on-disk store."""

    def test_file_layout(self, tmp_path, make_publication):
        _, publications = json_repositories(tmp_path)
        publication = make_publication()

        publications.save(publication)

        path = tmp_path / "publications" / f"{publication.id}.json"
        assert json.loads(path.read_text(encoding="utf-8"))["article_id"] == "article-1"
        assert not list((tmp_path / "publications").glob("*.tmp"))

    @pytest.mark.parametrize("record_id", ["../escape", "a/b", ".hidden", ""])
    def test_unsafe_ids_rejected(self, tmp_path, record_id):
        store = JsonFileRecordStore(tmp_path)

        with pytest.raises(ValueError):
            store.load(record_id)

    def test_corrupt_file_is_storage_error(self, tmp_path):
        _, publications = json_repositories(tmp_path)
        (tmp_path / "publications" / "broken.json").write_text("{not json", encoding="utf-8")

        result = publications.list_all()

        assert isinstance(result, Failure)
        assert result.code == "STORAGE_ERROR"
        assert result.is_retryable

    def test_unsafe_id_through_repository(self, tmp_path):
        _, publications = json_repositories(tmp_path)

        result = publications.find_by_id("../../etc/passwd")

        assert result.code == "STORAGE_ERROR"

    def test_remove(self, tmp_path):
        store = JsonFileRecordStore(tmp_path)
        store.store("abc", {"id": "abc"})

        assert store.remove("abc") is True
        assert store.load("abc") is None
        assert store.remove("abc") is False
