"""
AI content naming through a local Ollama vision model.

The image is downscaled and re-encoded as JPEG before upload; the model's
answer is normalized to the requested case style and length.
"""

import base64
import io
import time
from pathlib import Path
from typing import Callable, Optional, Tuple

import requests
from loguru import logger
from PIL import Image, UnidentifiedImageError

from . import casing
from .casing import CaseStyle
from .config import MAX_IMAGE_SIDE, OLLAMA_URL, REQUEST_TIMEOUT, RETRY_DELAY

MAX_ATTEMPTS = 2


def scaled_size(width: int, height: int, limit: int = MAX_IMAGE_SIDE) -> Tuple[int, int]:
    """Fit (width, height) inside limit x limit, keeping the aspect ratio."""
    longest = max(width, height)
    if longest <= limit:
        return width, height
    scale = limit / float(longest)
    return max(1, round(width * scale)), max(1, round(height * scale))


def encode_image(image_path: Path, limit: int = MAX_IMAGE_SIDE) -> Optional[str]:
    """Return the downscaled image as base64 JPEG, or None if it can't be decoded."""
    try:
        with Image.open(image_path) as img:
            size = scaled_size(img.width, img.height, limit)
            if size != img.size:
                img = img.resize(size, Image.Resampling.LANCZOS)
            if img.mode != 'RGB':
                img = img.convert('RGB')
            buffer = io.BytesIO()
            img.save(buffer, format='JPEG', quality=90)
    except UnidentifiedImageError:
        logger.error(f"Invalid image format: {image_path}")
        return None
    except Image.DecompressionBombError as e:
        logger.error(f"Image too large to decode {image_path}: {e}")
        return None
    except (OSError, ValueError) as e:
        logger.error(f"Could not read image {image_path}: {e}")
        return None

    return base64.b64encode(buffer.getvalue()).decode('ascii')


def build_prompt(case: str, max_chars: int, language: str) -> str:
    """Instruction sent alongside the image."""
    style = CaseStyle.parse(case)
    lines = [
        "Generate a filename that describes this image.",
        "",
        f"Use {case} formatting.",
    ]
    if style is CaseStyle.SNAKE:
        lines.append("That means lowercase words joined by underscores, for example cat_on_carpet.")
    lines.extend([
        f"Max {max_chars} characters.",
        f"Write it in {language} only.",
        "No file extension.",
        "No special characters.",
        "Only the key elements, one word if possible.",
        "",
        "Respond ONLY with the filename.",
    ])
    return "\n".join(lines)


class ContentDescriber:
    """
    Ask a vision model for a short descriptive filename.

    Args:
        session: Object with a requests-compatible ``post`` method
        url: Generate endpoint of the inference server
        timeout: Per-request timeout in seconds
        retry_delay: Pause before the single retry after a transport error
        sleep: Sleep function, replaceable in tests
    """

    def __init__(self, session=None, url: str = OLLAMA_URL, timeout: float = REQUEST_TIMEOUT,
                 retry_delay: float = RETRY_DELAY, sleep: Callable[[float], None] = time.sleep):
        self.session = session or requests.Session()
        self.url = url
        self.timeout = timeout
        self.retry_delay = retry_delay
        self.sleep = sleep

    def _request(self, payload: dict) -> Optional[dict]:
        """POST with one retry on transport errors; None on any failure."""
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                response = self.session.post(self.url, json=payload, timeout=self.timeout)
            except requests.RequestException as e:
                if attempt < MAX_ATTEMPTS:
                    logger.warning(f"First attempt failed, retrying... (model might be loading): {e}")
                    self.sleep(self.retry_delay)
                    continue
                logger.error(f"Failed to send request to Ollama after {MAX_ATTEMPTS} attempts: {e}")
                return None

            if attempt > 1:
                logger.info(f"Retry successful on attempt {attempt}")

            if not 200 <= response.status_code < 300:
                logger.error(f"Ollama API error status: {response.status_code} - Details: {response.text}")
                return None

            try:
                data = response.json()
            except ValueError as e:
                logger.error(f"Failed to parse Ollama response: {e}")
                return None
            if not isinstance(data, dict):
                logger.error("Failed to parse Ollama response: not a JSON object")
                return None
            return data
        return None

    def describe(self, image_path: Path, model: str, max_chars: int,
                 case: str, language: str) -> Optional[str]:
        """Return a case-normalized name of at most ``max_chars`` characters."""
        image_data = encode_image(image_path)
        if image_data is None:
            return None

        payload = {
            'model': model,
            'prompt': build_prompt(case, max_chars, language),
            'images': [image_data],
            'stream': False,
        }

        logger.info(f"Analyzing image content with AI model: {model}...")
        data = self._request(payload)
        if data is None:
            return None

        response_text = data.get('response')
        if not isinstance(response_text, str):
            logger.error(f"Failed to parse Ollama response: 'response' is {type(response_text).__name__}")
            return None

        text = response_text.strip()
        if not text:
            logger.error("Ollama returned empty response")
            return None

        name = casing.convert(text, case)[:max_chars]
        if not name:
            logger.error(f"Ollama response {text!r} has no usable characters")
            return None

        logger.info(f"AI generated filename: '{name}'")
        return name
