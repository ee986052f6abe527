"""
Postboard Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the JSON the API returns.
How:   FastAPI serializes route return values through these models and
       generates the OpenAPI documentation from them.

Request bodies are multipart forms (title, description, image) and are
declared directly on the route functions with Form()/File().
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.post import Post


class PostResponse(BaseModel):
    """
    What:  JSON representation of one post.
    Who:   Returned by create, get, update, and (as list items) by list.

    Serialized with the document's field name `imageUrl`.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Post identifier (24-char hex ObjectId)")
    title: str = Field(description="Post title")
    description: str = Field(description="Post body text")
    image_url: str = Field(
        alias="imageUrl",
        description="Path of the uploaded image, as written by the server",
    )

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            description=post.description,
            imageUrl=post.image_url,
        )


class MessageResponse(BaseModel):
    """Acknowledgement body, e.g. after a delete or for a missing post."""

    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    What:  Error body for validation, store, and filesystem failures.

    Example:
        {
            "error": "Field 'title' is required and must not be empty",
            "details": {"field": "title"}
        }
    """

    error: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")


class HealthResponse(BaseModel):
    """Health check response showing service and store status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uploads_path_configured: bool = Field(description="Whether UPLOADS_PATH is set")
    uptime_seconds: float = Field(description="Seconds since service started")
