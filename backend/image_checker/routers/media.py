"""
API routes for image hosting and reverse image search.
"""

from typing import Any, Dict
from fastapi import APIRouter, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from image_checker.config import get_settings
from image_checker.schemas.media import ReverseSearchRequest, UploadedImage
from image_checker.services.image_host_service import ImageHostService
from image_checker.services.reverse_search_service import ReverseImageSearchService
from image_checker.utils.file_handler import ImageFileValidator
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()
router = APIRouter(tags=["media"])


@router.post("/find-related")
def find_related(payload: ReverseSearchRequest) -> Dict[str, Any]:
    """
    Find images visually similar to the given one.

    Returns the reverse image search provider's response as is.
    """
    logger.info("Find related request", image_src=payload.image_src)
    return ReverseImageSearchService().search(payload.image_src)


@router.post("/images", response_model=UploadedImage)
async def upload_image(file: UploadFile = File(...)) -> UploadedImage:
    """
    Upload an image to the image host.

    Returns the public URL to use as imageUrl in later requests.
    """
    logger.info("Upload image request", filename=file.filename, content_type=file.content_type)

    content = await ImageFileValidator().read_image(
        file, settings.allowed_image_extensions, settings.max_image_size
    )
    return await run_in_threadpool(ImageHostService().upload, content, file.content_type, file.filename)
