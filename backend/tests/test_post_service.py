"""
Postboard Backend — Post Service Unit Tests
=============================================

What:  Tests for PostService rules without HTTP.
How:   Real PostStore over the in-memory collection, real UploadReceiver in
       a temp directory; failures injected with AsyncMock.

What we test:
    ✅ Validation happens before any file is written
    ✅ Failed store writes discard the uploaded file
    ✅ Update keeps imageUrl when no image is sent
    ✅ Delete without UPLOADS_PATH removes the document, then fails
"""

import os
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId

from app.exceptions import (
    ConfigurationError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from app.models.post import PostStore
from app.services.post_service import UPLOADS_PATH_MISSING, PostService
from app.services.upload_service import UploadReceiver


@pytest.fixture
def service(posts_collection, upload_env):
    return PostService(
        store=PostStore(posts_collection),
        receiver=UploadReceiver("uploads"),
        uploads_path=str(upload_env),
    )


def stored_files(root):
    uploads = root / "uploads"
    return sorted(os.listdir(uploads)) if uploads.exists() else []


class TestCreatePost:

    @pytest.mark.asyncio
    async def test_create_stores_file_and_document(self, service, upload_env, make_upload):
        post = await service.create_post("Title", "Body", make_upload(b"img", "a.png"))

        assert post.title == "Title"
        assert post.image_url.startswith("uploads" + os.sep)
        assert (upload_env / post.image_url).read_bytes() == b"img"

    @pytest.mark.asyncio
    async def test_missing_image_rejected(self, service, upload_env):
        with pytest.raises(ValidationError, match="image"):
            await service.create_post("Title", "Body", None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,description,field", [
        ("", "Body", "title"),
        ("   ", "Body", "title"),
        ("Title", "", "description"),
        (None, "Body", "title"),
    ])
    async def test_blank_fields_rejected_before_write(
        self, service, upload_env, make_upload, title, description, field
    ):
        with pytest.raises(ValidationError) as exc_info:
            await service.create_post(title, description, make_upload(b"img", "a.png"))

        assert exc_info.value.field == field
        assert stored_files(upload_env) == []

    @pytest.mark.asyncio
    async def test_insert_failure_discards_file(self, service, upload_env, make_upload):
        service.store.create = AsyncMock(side_effect=StoreError())

        with pytest.raises(StoreError):
            await service.create_post("Title", "Body", make_upload(b"img", "a.png"))

        assert stored_files(upload_env) == []


class TestGetAndList:

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            await service.get_post(str(ObjectId()))
        assert exc_info.value.message == "Post not found"

    @pytest.mark.asyncio
    async def test_list_returns_created_posts(self, service, make_upload):
        for i in range(4):
            await service.create_post(f"T{i}", "D", make_upload(b"x", f"{i}.png"))

        assert len(await service.list_posts()) == 4


class TestUpdatePost:

    @pytest.mark.asyncio
    async def test_update_without_image_keeps_image_url(self, service, make_upload):
        post = await service.create_post("Old", "Old body", make_upload(b"x", "a.png"))

        updated = await service.update_post(post.id, "New", "New body", None)

        assert (updated.title, updated.description) == ("New", "New body")
        assert updated.image_url == post.image_url

    @pytest.mark.asyncio
    async def test_update_with_image_replaces_url_and_keeps_old_file(
        self, service, upload_env, make_upload
    ):
        post = await service.create_post("Old", "Old body", make_upload(b"old", "a.png"))

        updated = await service.update_post(post.id, "New", "New body", make_upload(b"new", "b.jpg"))

        assert updated.image_url != post.image_url
        assert (upload_env / updated.image_url).read_bytes() == b"new"
        assert (upload_env / post.image_url).exists()

    @pytest.mark.asyncio
    async def test_update_blank_title_rejected(self, service, make_upload):
        post = await service.create_post("Old", "Old body", make_upload(b"x", "a.png"))

        with pytest.raises(ValidationError):
            await service.update_post(post.id, "", "New body", None)

    @pytest.mark.asyncio
    async def test_update_malformed_id_rejected_before_write(self, service, upload_env, make_upload):
        with pytest.raises(ValidationError):
            await service.update_post("nope", "T", "D", make_upload(b"x", "a.png"))
        assert stored_files(upload_env) == []

    @pytest.mark.asyncio
    async def test_update_missing_post_discards_new_file(self, service, upload_env, make_upload):
        with pytest.raises(NotFoundError):
            await service.update_post(str(ObjectId()), "T", "D", make_upload(b"x", "a.png"))
        assert stored_files(upload_env) == []


class TestDeletePost:

    @pytest.mark.asyncio
    async def test_delete_removes_document_and_file(self, service, upload_env, make_upload):
        post = await service.create_post("T", "D", make_upload(b"x", "a.png"))

        await service.delete_post(post.id)

        assert not (upload_env / post.image_url).exists()
        with pytest.raises(NotFoundError):
            await service.get_post(post.id)

    @pytest.mark.asyncio
    async def test_delete_missing_file_still_succeeds(self, service, upload_env, make_upload):
        post = await service.create_post("T", "D", make_upload(b"x", "a.png"))
        os.remove(upload_env / post.image_url)

        await service.delete_post(post.id)

    @pytest.mark.asyncio
    async def test_delete_without_uploads_path(self, posts_collection, upload_env, make_upload):
        """Document is removed first; the missing configuration is found afterwards."""
        service = PostService(
            store=PostStore(posts_collection),
            receiver=UploadReceiver("uploads"),
            uploads_path=None,
        )
        post = await service.create_post("T", "D", make_upload(b"x", "a.png"))

        with pytest.raises(ConfigurationError) as exc_info:
            await service.delete_post(post.id)

        assert exc_info.value.message == UPLOADS_PATH_MISSING
        assert posts_collection.documents == {}
        assert (upload_env / post.image_url).exists()

    @pytest.mark.asyncio
    async def test_delete_twice(self, service, make_upload):
        post = await service.create_post("T", "D", make_upload(b"x", "a.png"))

        await service.delete_post(post.id)
        with pytest.raises(NotFoundError):
            await service.delete_post(post.id)
