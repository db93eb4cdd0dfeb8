import numpy as np
from PIL import Image


def to_rgb8(framebuffer) -> np.ndarray:
    """Scale a float framebuffer (H, W, 3) to 8-bit RGB.

    Each pixel is divided by max(1, r, g, b): bright pixels keep their hue,
    in-range pixels are untouched. Bytes are truncated, not rounded.
    """
    fb = np.asarray(framebuffer, dtype=np.float32)
    max_component = np.maximum(np.float32(1.0), fb.max(axis=-1, keepdims=True))
    scaled = np.float32(255.0) * fb / max_component
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def save_image(framebuffer, path: str) -> None:
    """Write the framebuffer to `path`; a .ppm suffix gives binary P6."""
    img = Image.fromarray(to_rgb8(framebuffer))
    img.save(path)
