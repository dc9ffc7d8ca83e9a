# renderer/tone_mapping.py
import numpy as np

# Largest channel value before quantization; 256 * 0.999 stays below 256.
MAX_CHANNEL = 0.999


def gamma_correct(accumulated: np.ndarray, samples_per_pixel: int) -> np.ndarray:
    """
    Average the per-pixel sums and apply gamma 2 (square root).
    NaN samples become 0 so a degenerate ray cannot poison the cast below.
    """
    averaged = accumulated / samples_per_pixel
    averaged = np.nan_to_num(averaged, nan=0.0, posinf=MAX_CHANNEL, neginf=0.0)
    return np.sqrt(np.maximum(averaged, 0.0))


def to_rgb8(linear: np.ndarray) -> np.ndarray:
    """Clamp to [0, 0.999] and quantize each channel to 8 bits."""
    return (256.0 * np.clip(linear, 0.0, MAX_CHANNEL)).astype(np.uint8)


def tone_map(accumulated: np.ndarray, samples_per_pixel: int) -> np.ndarray:
    """
    Convert summed radiance of shape (height, width, 3) into an 8-bit RGB
    buffer of the same shape.
    """
    return to_rgb8(gamma_correct(accumulated, samples_per_pixel))
