"""
Pytest configuration and fixtures for the room design API tests.
"""
import base64
import io
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from app.config import Settings


@pytest.fixture
def config():
    """Settings with a primary key and no fallback key."""
    return Settings(lovable_api_key="primary-key", openai_api_key="")


@pytest.fixture
def config_with_fallback():
    return Settings(lovable_api_key="primary-key", openai_api_key="fallback-key")


@pytest.fixture
def http_session():
    """Mock requests.Session; set post.side_effect / return_value per test."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def png_bytes():
    img = Image.new("RGB", (64, 48), color="beige")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def room_image_data_url(png_bytes):
    """A valid PNG room photo as a base64 data URL."""
    return f"data:image/png;base64,{base64.b64encode(png_bytes).decode()}"
