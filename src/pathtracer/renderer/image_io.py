# renderer/image_io.py
import logging
from pathlib import Path

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def buffer_to_image(buffer: np.ndarray) -> Image.Image:
    """Wrap a (height, width, 3) uint8 buffer, row 0 at the top, as a Pillow image."""
    if buffer.ndim != 3 or buffer.shape[2] != 3:
        raise ValueError(f"expected a (height, width, 3) buffer, got shape {buffer.shape}")
    return Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8))


def save_image(buffer: np.ndarray, path) -> Path:
    """
    Encode the buffer to ``path``. Pillow picks the container from the
    extension (PNG, JPEG, PPM, ...).
    """
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    buffer_to_image(buffer).save(path)
    logger.info("Saved %dx%d image to %s", buffer.shape[1], buffer.shape[0], path)
    return path
