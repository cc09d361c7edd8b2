"""
Tests for standard operating procedure management.
"""

import pytest
from pydantic import ValidationError

from kushl.pricing import TASK_CATEGORIES
from kushl.shared.exceptions import SopNotFoundError, StorageError
from kushl.sops import SOP_KEY, SopCreate, SopService, SopUpdate
from kushl.storage import KeyValueStore

from conftest import START, FakeClock


def _create(category: str = "Video Editing", title: str = "Export settings") -> SopCreate:
    return SopCreate(
        category=category,
        title=title,
        content="Export at 1080p, H.264.",
        created_by="admin-1",
        creator_name="Admin",
    )


class TestSopCrud:
    def test_add_and_get(self, sop_service: SopService) -> None:
        sop = sop_service.add_sop(_create())

        assert sop.id == "id-1"
        assert sop.created_at == START
        assert sop.updated_at == START
        assert sop_service.get_sop("id-1") == sop
        assert sop_service.get_sop("missing") is None

    def test_stored_with_camel_case_keys(self, sop_service: SopService, store: KeyValueStore) -> None:
        sop_service.add_sop(_create())

        [document] = store.get(SOP_KEY)
        assert document["creatorName"] == "Admin"
        assert document["createdBy"] == "admin-1"
        assert "createdAt" in document

    def test_list_is_empty_without_data(self, sop_service: SopService) -> None:
        assert sop_service.list_sops() == []

    def test_filter_by_category(self, sop_service: SopService) -> None:
        sop_service.add_sop(_create("Video Editing", "One"))
        sop_service.add_sop(_create("Logo Design", "Two"))
        sop_service.add_sop(_create("Video Editing", "Three"))

        titles = [sop.title for sop in sop_service.get_sops_by_category("Video Editing")]
        assert titles == ["One", "Three"]
        assert sop_service.get_sops_by_category("Voice Over") == []

    def test_update_applies_set_fields(self, sop_service: SopService, clock: FakeClock) -> None:
        sop = sop_service.add_sop(_create())
        later = clock.advance(hours=2)

        updated = sop_service.update_sop(sop.id, SopUpdate(title="Render settings"))

        assert updated.title == "Render settings"
        assert updated.content == sop.content
        assert updated.created_at == START
        assert updated.updated_at == later
        assert sop_service.get_sop(sop.id).title == "Render settings"

    def test_update_unknown(self, sop_service: SopService) -> None:
        with pytest.raises(SopNotFoundError):
            sop_service.update_sop("missing", SopUpdate(title="x"))

    def test_update_rejects_null(self) -> None:
        with pytest.raises(ValidationError):
            SopUpdate(content=None)

    def test_delete(self, sop_service: SopService) -> None:
        first = sop_service.add_sop(_create(title="One"))
        second = sop_service.add_sop(_create(title="Two"))

        sop_service.delete_sop(first.id)

        assert [sop.id for sop in sop_service.list_sops()] == [second.id]
        with pytest.raises(SopNotFoundError):
            sop_service.delete_sop(first.id)

    def test_malformed_storage(self, sop_service: SopService, store: KeyValueStore) -> None:
        store.set(SOP_KEY, [{"id": "x"}])

        with pytest.raises(StorageError):
            sop_service.list_sops()


class TestCategories:
    def test_available_categories(self, sop_service: SopService) -> None:
        assert sop_service.available_categories() == list(TASK_CATEGORIES)

    def test_coverage(self, sop_service: SopService) -> None:
        sop_service.add_sop(_create("Logo Design"))
        sop_service.add_sop(_create("Video Editing"))
        sop_service.add_sop(_create("Logo Design"))

        assert sop_service.categories_with_sops() == ["Logo Design", "Video Editing"]
        without = sop_service.categories_without_sops()
        assert "Logo Design" not in without
        assert "Video Editing" not in without
        assert len(without) == len(TASK_CATEGORIES) - 2

    def test_custom_category_counts_as_covered(self, sop_service: SopService) -> None:
        sop_service.add_sop(_create("Internal Onboarding"))

        assert sop_service.categories_with_sops() == ["Internal Onboarding"]
        assert sop_service.categories_without_sops() == list(TASK_CATEGORIES)
