"""
Postboard Backend — Post Route Handlers
=========================================

What:  The five post endpoints (create, list, get, update, delete).
How:   Extracts form fields / path params, delegates to PostService,
       returns JSON. Errors raised by the service are turned into responses
       by the global exception handlers in main.py.
Who:   Mounted by create_app() at settings.posts_prefix (default /api/posts).

Endpoints (relative to the mount point):
    POST   ""      multipart title, description, image  → 201 Post
    GET    ""                                           → 200 [Post]
    GET    /{id}                                        → 200 Post | 404
    PUT    /{id}   multipart title, description, image? → 200 Post | 404
    DELETE /{id}                                        → 200 message | 404 | 500
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pymongo.asynchronous.collection import AsyncCollection

from app.config import settings
from app.database import get_posts_collection
from app.models.post import PostStore
from app.schemas.post import ErrorResponse, MessageResponse, PostResponse
from app.services.post_service import PostService
from app.services.upload_service import UploadReceiver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])


def get_upload_receiver() -> UploadReceiver:
    return UploadReceiver(upload_dir=settings.upload_dir)


def get_post_service(
    posts: AsyncCollection = Depends(get_posts_collection),
    receiver: UploadReceiver = Depends(get_upload_receiver),
) -> PostService:
    """
    FastAPI dependency assembling a PostService for one request.

    UPLOADS_PATH is read from settings here, at the edge, and passed in.
    """
    return PostService(
        store=PostStore(posts),
        receiver=receiver,
        uploads_path=settings.uploads_path,
    )


@router.post(
    "",
    status_code=201,
    response_model=PostResponse,
    responses={
        400: {"description": "Missing field or image", "model": ErrorResponse},
        500: {"description": "Store or filesystem failure", "model": ErrorResponse},
    },
    summary="Create a post with an image",
)
async def create_post(
    title: str = Form(default=""),
    description: str = Form(default=""),
    image: Optional[UploadFile] = File(default=None, description="Image file for the post"),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = await service.create_post(title=title, description=description, image=image)
    return PostResponse.from_post(post)


@router.get(
    "",
    response_model=List[PostResponse],
    responses={500: {"description": "Store failure", "model": ErrorResponse}},
    summary="List all posts",
)
async def list_posts(service: PostService = Depends(get_post_service)) -> List[PostResponse]:
    """Every post, in the store's natural order."""
    posts = await service.list_posts()
    return [PostResponse.from_post(post) for post in posts]


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Post not found", "model": MessageResponse},
    },
    summary="Get a post by id",
)
async def get_post(post_id: str, service: PostService = Depends(get_post_service)) -> PostResponse:
    post = await service.get_post(post_id)
    return PostResponse.from_post(post)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses={
        400: {"description": "Malformed id or empty field", "model": ErrorResponse},
        404: {"description": "Post not found", "model": MessageResponse},
    },
    summary="Update a post",
    description=(
        "Replaces title and description. The image is replaced only when a new "
        "file is uploaded; otherwise imageUrl is left unchanged."
    ),
)
async def update_post(
    post_id: str,
    title: str = Form(default=""),
    description: str = Form(default=""),
    image: Optional[UploadFile] = File(default=None, description="Replacement image (optional)"),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    post = await service.update_post(
        post_id=post_id,
        title=title,
        description=description,
        image=image,
    )
    return PostResponse.from_post(post)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={
        404: {"description": "Post not found", "model": MessageResponse},
        500: {"description": "UPLOADS_PATH not set, or file removal failed"},
    },
    summary="Delete a post and its image",
)
async def delete_post(
    post_id: str,
    service: PostService = Depends(get_post_service),
) -> MessageResponse:
    await service.delete_post(post_id)
    return MessageResponse(message="Post and image deleted successfully")
