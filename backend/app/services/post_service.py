"""
Postboard Backend — Post Service (Business Logic)
===================================================

What:  The rules behind the five post endpoints.
How:   Composes PostStore (documents) and UploadReceiver (image files).
       The two are independent resources; this class is the only place that
       coordinates them, and it does so without transactions.
Who:   Called by the route handlers in app.routes.posts.

Ordering per operation:
    create: validate fields + image → store file → insert document
            (insert failure discards the file)
    update: validate id + fields → store new file (if any) → update document
            (missing post discards the new file; the old image is kept on disk)
    delete: delete document → check uploads_path → remove file

Note on delete:
    The document is removed before uploads_path is checked, so with no
    uploads path configured the post is gone but the caller gets a
    ConfigurationError and the image stays on disk.
"""

import logging
from typing import Dict, List, Optional

from fastapi import UploadFile

from app.exceptions import ConfigurationError, NotFoundError, ValidationError
from app.models.post import Post, PostStore, parse_post_id
from app.services.upload_service import UploadReceiver

logger = logging.getLogger(__name__)

UPLOADS_PATH_MISSING = "UPLOADS_PATH environment variable is not set"


def require_text(value: Optional[str], field: str) -> str:
    """Reject missing or whitespace-only text fields."""
    if value is None or not value.strip():
        raise ValidationError(
            message=f"Field '{field}' is required and must not be empty",
            field=field,
        )
    return value


class PostService:
    """
    Business logic for post operations.

    Args:
        store:        accessor over the posts collection
        receiver:     upload receiver for image files
        uploads_path: base directory that stored imageUrls are resolved
                      against on delete; None when not configured
    """

    def __init__(
        self,
        store: PostStore,
        receiver: UploadReceiver,
        uploads_path: Optional[str],
    ):
        self.store = store
        self.receiver = receiver
        self.uploads_path = uploads_path

    async def create_post(
        self,
        title: Optional[str],
        description: Optional[str],
        image: Optional[UploadFile],
    ) -> Post:
        """
        Raises:
            ValidationError: empty title/description or no image
            FilesystemError: the image could not be written
            StoreError:      the insert failed (the written image is discarded)
        """
        title = require_text(title, "title")
        description = require_text(description, "description")
        if image is None or not image.filename:
            raise ValidationError(message="An image file is required", field="image")

        image_url = await self.receiver.receive(image)
        try:
            return await self.store.create(title, description, image_url)
        except Exception:
            await self.receiver.discard(image_url)
            raise

    async def list_posts(self) -> List[Post]:
        return await self.store.find_all()

    async def get_post(self, post_id: str) -> Post:
        post = await self.store.find_by_id(post_id)
        if post is None:
            raise NotFoundError(resource="Post", resource_id=post_id)
        return post

    async def update_post(
        self,
        post_id: str,
        title: Optional[str],
        description: Optional[str],
        image: Optional[UploadFile],
    ) -> Post:
        """
        Replace title and description; replace imageUrl only when a new image
        was uploaded.

        The previously referenced image file is not deleted.
        """
        parse_post_id(post_id)
        fields: Dict[str, str] = {
            "title": require_text(title, "title"),
            "description": require_text(description, "description"),
        }

        image_url = await self.receiver.receive(image)
        if image_url is not None:
            fields["imageUrl"] = image_url

        try:
            post = await self.store.update_by_id(post_id, fields)
        except Exception:
            if image_url is not None:
                await self.receiver.discard(image_url)
            raise

        if post is None:
            if image_url is not None:
                await self.receiver.discard(image_url)
            raise NotFoundError(resource="Post", resource_id=post_id)
        logger.info("Post updated: %s (new image: %s)", post_id, image_url is not None)
        return post

    async def delete_post(self, post_id: str) -> None:
        """
        Raises:
            ValidationError:    malformed id
            NotFoundError:      no post with this id
            ConfigurationError: uploads_path not configured (document already removed)
            FilesystemError:    image exists but could not be removed
        """
        post = await self.store.delete_by_id(post_id)
        if post is None:
            raise NotFoundError(resource="Post", resource_id=post_id)
        logger.info("Post deleted: %s", post_id)

        if not self.uploads_path:
            logger.error(
                "Post %s removed but image %s kept: UPLOADS_PATH is not set",
                post_id,
                post.image_url,
            )
            raise ConfigurationError(message=UPLOADS_PATH_MISSING, setting="UPLOADS_PATH")

        await self.receiver.remove(post.image_url, self.uploads_path)
