"""
Image file to base64 payload conversion.
"""

import asyncio
import base64
from pathlib import Path

import structlog

from resilient_ocr.ocr.exceptions import ImageProcessingError


logger = structlog.get_logger(__name__)


def _read_base64(path: Path) -> str:
    return base64.b64encode(path.read_bytes()).decode("ascii")


async def image_to_base64(image_path: str | Path) -> str:
    """
    Read an image file and return its base64 encoding.
    
    The file is read in a worker thread to keep the event loop responsive.
    
    Raises:
        ImageProcessingError: File missing, unreadable, or a directory
    """
    path = Path(image_path)
    try:
        return await asyncio.to_thread(_read_base64, path)
    except OSError as e:
        logger.error("image_to_base64 failed", path=str(path), error=str(e))
        raise ImageProcessingError(
            "Failed to process image file",
            details={"path": str(path), "error_type": type(e).__name__},
        ) from e
