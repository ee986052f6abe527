"""
Postboard Backend — Upload Receiver
======================================

What:  Receives the single `image` file of a multipart request, writes it to
       the uploads directory, and removes image files when posts are deleted.
How:   `generate_storage_name` derives the on-disk name from the original
       filename, an injected clock, and an injected uniqueness token.
       Writes use aiofiles so the event loop is not blocked on disk I/O.
Who:   Called by PostService for create, update, and delete.

Storage Layout:
    uploads/
    ├── 1700000000000-1a2b3c4d.png
    └── 1700000000153-9f8e7d6c.jpg

    Name = <epoch milliseconds>-<token><original extension>. The stored
    imageUrl is "<upload_dir>/<name>", relative to the working directory.

No type or size validation is performed: any bytes are stored as-is.
"""

import logging
import os
import secrets
import time
from pathlib import Path
from typing import Callable, Optional

import aiofiles
from fastapi import UploadFile

from app.exceptions import FilesystemError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
TokenSource = Callable[[], str]


def random_token() -> str:
    """Default uniqueness source: 8 random hex characters."""
    return secrets.token_hex(4)


def generate_storage_name(
    original_name: str,
    clock: Clock = time.time,
    token_source: TokenSource = random_token,
) -> str:
    """
    Build the stored filename for an upload.

    Two uploads in the same millisecond get different names as long as the
    token source does not repeat.

    Example:
        generate_storage_name("cat.png", clock=lambda: 1700000000.0,
                              token_source=lambda: "abcd")
        → "1700000000000-abcd.png"
    """
    extension = os.path.splitext(original_name)[1]
    millis = int(clock() * 1000)
    return f"{millis}-{token_source()}{extension}"


class UploadReceiver:
    """
    Manages the lifecycle of uploaded image files.

    Lifecycle of an uploaded file:
        1. receive(): bytes written under upload_dir, relative path returned
        2. path stored in a post document as imageUrl
        3. discard(): removed again if the document write failed
        4. remove(): removed when the post is deleted
    """

    def __init__(
        self,
        upload_dir: str,
        clock: Clock = time.time,
        token_source: TokenSource = random_token,
    ):
        self.upload_dir = upload_dir
        self.clock = clock
        self.token_source = token_source

    def storage_path(self, original_name: str) -> str:
        """Relative path a file with this original name would be stored at."""
        name = generate_storage_name(original_name, self.clock, self.token_source)
        return os.path.join(self.upload_dir, name)

    async def receive(self, upload: Optional[UploadFile]) -> Optional[str]:
        """
        Store the uploaded file, if there is one.

        A part with an empty filename is what browsers send when no file was
        chosen; it counts as no upload.

        Returns:
            The relative storage path, or None when no file was uploaded.
        Raises:
            FilesystemError if the directory or file cannot be written.
        """
        if upload is None or not upload.filename:
            return None

        relative_path = self.storage_path(upload.filename)
        try:
            content = await upload.read()
            Path(self.upload_dir).mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(relative_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", relative_path, str(e))
            raise FilesystemError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": relative_path, "os_error": str(e)},
            ) from e
        finally:
            await upload.close()

        logger.info(
            "Upload stored: %s -> %s (%d bytes)",
            upload.filename,
            relative_path,
            len(content),
        )
        return relative_path

    async def remove(self, image_url: str, uploads_path: str) -> bool:
        """
        Delete the image file backing a post.

        The file is located by joining the configured uploads base path with
        the stored imageUrl.

        Returns:
            True if a file was deleted, False if there was nothing at the path.
        Raises:
            FilesystemError for any failure other than the file being absent.
        """
        image_path = os.path.join(uploads_path, image_url)
        try:
            os.remove(image_path)
        except FileNotFoundError:
            logger.info("Image file not found at: %s", image_path)
            return False
        except OSError as e:
            logger.error("Failed to delete image %s: %s", image_path, str(e))
            raise FilesystemError(
                message=f"Failed to delete image file: {e.strerror or e}",
                context={"path": image_path, "os_error": str(e)},
            ) from e
        logger.info("Image file deleted successfully: %s", image_path)
        return True

    async def discard(self, relative_path: str) -> None:
        """
        Best-effort removal of a file written earlier in the same request.

        When:  The store write that should have referenced the file failed.
        Never raises; a leftover file is only an orphan.
        """
        try:
            os.remove(relative_path)
            logger.info("Discarded orphaned upload: %s", relative_path)
        except FileNotFoundError:
            logger.debug("Discard: file already gone: %s", relative_path)
        except OSError as e:
            logger.warning("Failed to discard upload %s: %s", relative_path, str(e))
