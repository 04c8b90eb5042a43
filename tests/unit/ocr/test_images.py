"""
Unit tests for image_to_base64.
"""

import base64

import pytest

from resilient_ocr.ocr.exceptions import ImageProcessingError
from resilient_ocr.ocr.images import image_to_base64


@pytest.mark.asyncio
async def test_encodes_file_contents(sample_image_path, sample_image_bytes):
    encoded = await image_to_base64(sample_image_path)
    
    assert base64.b64decode(encoded) == sample_image_bytes


@pytest.mark.asyncio
async def test_accepts_string_paths(sample_image_path, sample_image_base64):
    assert await image_to_base64(str(sample_image_path)) == sample_image_base64


@pytest.mark.asyncio
async def test_missing_file_raises_image_processing_error(tmp_path):
    with pytest.raises(ImageProcessingError) as exc_info:
        await image_to_base64(tmp_path / "missing.jpg")
    
    assert exc_info.value.message == "Failed to process image file"
    assert exc_info.value.details["error_type"] == "FileNotFoundError"
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)


@pytest.mark.asyncio
async def test_directory_raises_image_processing_error(tmp_path):
    with pytest.raises(ImageProcessingError):
        await image_to_base64(tmp_path)
