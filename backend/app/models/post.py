"""
Postboard Backend — Post Document Model & Entity Accessor
===========================================================

What:  The Post document shape and `PostStore`, the typed accessor over the
       `posts` collection.
How:   Post documents are plain BSON dicts in MongoDB:
           {"_id": ObjectId, "title": str, "description": str, "imageUrl": str}
       `Post` is the validated Python view of one document; `PostStore`
       converts between the two and wraps driver failures in StoreError.
Who:   Used by PostService for every CRUD operation.

Document Design:
    - _id: assigned by MongoDB on insert; exposed as the 24-char hex string `id`
    - title / description: required, non-empty
    - imageUrl: required, non-empty; path written by the Upload Receiver.
      Nothing in the store checks that the file exists.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from app.exceptions import StoreError, ValidationError

logger = logging.getLogger(__name__)


class Post(BaseModel):
    """
    A persisted post.

    Field names follow the stored document (`imageUrl`), with a snake_case
    attribute for Python callers.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    image_url: str = Field(alias="imageUrl", min_length=1)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Post":
        """Build a Post from a raw `posts` document."""
        return cls(
            id=str(document["_id"]),
            title=document["title"],
            description=document["description"],
            imageUrl=document["imageUrl"],
        )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title='{self.title}')>"


def parse_post_id(post_id: str) -> ObjectId:
    """
    Convert an id path parameter into an ObjectId.

    Only the 24-character hex form is accepted. bson also treats any
    12-character string as a valid id, which no client of this API ever sends.

    Raises:
        ValidationError: the id is not a well-formed ObjectId
    """
    if len(post_id) != 24 or not ObjectId.is_valid(post_id):
        raise ValidationError(
            message=f"'{post_id}' is not a valid post id",
            field="id",
            context={"post_id": post_id},
        )
    return ObjectId(post_id)


@contextmanager
def _store_errors(operation: str, **context: Any) -> Iterator[None]:
    """Translate driver exceptions raised inside the block into StoreError."""
    try:
        yield
    except PyMongoError as e:
        logger.error("Store %s failed: %s", operation, str(e))
        raise StoreError(
            context={"operation": operation, "error_type": type(e).__name__, **context},
        ) from e


class PostStore:
    """
    Typed accessor for the `posts` collection.

    Methods return `Post` objects or None for a missing document; deciding
    whether None is an error belongs to the caller.
    """

    def __init__(self, collection: AsyncCollection):
        self.collection = collection

    async def create(self, title: str, description: str, image_url: str) -> Post:
        document = {"title": title, "description": description, "imageUrl": image_url}
        with _store_errors("insert"):
            result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        logger.info("Post created: %s", result.inserted_id)
        return Post.from_document(document)

    async def find_all(self) -> List[Post]:
        """All posts in the store's natural order; no sort is applied."""
        with _store_errors("find"):
            documents = [document async for document in self.collection.find({})]
        return [Post.from_document(document) for document in documents]

    async def find_by_id(self, post_id: str) -> Optional[Post]:
        oid = parse_post_id(post_id)
        with _store_errors("find_one", post_id=post_id):
            document = await self.collection.find_one({"_id": oid})
        return Post.from_document(document) if document else None

    async def update_by_id(self, post_id: str, fields: Dict[str, Any]) -> Optional[Post]:
        """
        Overwrite the given fields and return the document as it is after the update.

        `fields` uses document keys (`imageUrl`, not `image_url`).
        """
        oid = parse_post_id(post_id)
        with _store_errors("update", post_id=post_id):
            document = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        return Post.from_document(document) if document else None

    async def delete_by_id(self, post_id: str) -> Optional[Post]:
        """Remove a post; returns the removed document so its image can be found."""
        oid = parse_post_id(post_id)
        with _store_errors("delete", post_id=post_id):
            document = await self.collection.find_one_and_delete({"_id": oid})
        return Post.from_document(document) if document else None
