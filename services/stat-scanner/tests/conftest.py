"""Shared test fixtures for stat scanner tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add parent directory to path so we can import the modules
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Generate a small PNG screenshot-like image for testing."""
    import cv2

    img = np.zeros((400, 300, 3), dtype=np.uint8)
    img[:] = (240, 240, 240)

    # Dark bars simulating stat rows
    cv2.rectangle(img, (20, 40), (280, 60), (30, 30, 30), -1)
    cv2.rectangle(img, (20, 100), (200, 120), (30, 30, 30), -1)
    cv2.rectangle(img, (20, 160), (240, 180), (30, 30, 30), -1)

    _, buf = cv2.imencode(".png", img)
    return buf.tobytes()


@pytest.fixture
def wide_image_bytes() -> bytes:
    """An image already wider than the upscale threshold."""
    import cv2

    img = np.zeros((800, 1200, 3), dtype=np.uint8)
    img[:] = (200, 200, 200)
    _, buf = cv2.imencode(".png", img)
    return buf.tobytes()


@pytest.fixture
def invalid_bytes() -> bytes:
    """Non-image bytes for testing graceful degradation."""
    return b"this is not an image file at all"


@pytest.fixture
def profile_text() -> str:
    """Recognized text of a complete profile screen, as the remote service returns it."""
    return (
        "plyrzero & TeamMate\n"
        "Start Date: 7/10/2016\n"
        "Distance Walked 15,223.8 km\n"
        "Pokémon Caught 245,600\n"
        "PokéStops Visited 89,200\n"
        "Total XP 125,340,000"
    )


@pytest.fixture
def ocr_space_body() -> dict:
    """Successful parse response from the remote service."""
    return {
        "ParsedResults": [
            {
                "TextOverlay": {"Lines": [], "HasOverlay": False},
                "TextOrientation": "0",
                "FileParseExitCode": 1,
                "ParsedText": "Distance Walked 1,234.5 km\r\nTotal XP 2,500,000\r\n",
                "ErrorMessage": "",
            }
        ],
        "OCRExitCode": 1,
        "IsErroredOnProcessing": False,
        "ProcessingTimeInMilliseconds": "640",
    }


@pytest.fixture
def tesseract_data() -> dict:
    """pytesseract.image_to_data output (Output.DICT) for two stat lines."""
    return {
        "level": [1, 5, 5, 5, 5, 5, 5],
        "block_num": [0, 1, 1, 1, 1, 1, 1],
        "par_num": [0, 1, 1, 1, 1, 1, 1],
        "line_num": [0, 1, 1, 1, 2, 2, 2],
        "word_num": [0, 1, 2, 3, 1, 2, 3],
        "text": ["", "Pokémon", "Caught", "245,600", "Total", "XP", "125,340,000"],
        "conf": [-1, 91, 95, 88, 90, 96, 80],
    }
