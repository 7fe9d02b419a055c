import os
import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Qt tests run headless; this has to be set before the first QApplication is built.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def solid_rgba():
    """Return a factory for ``height x width`` rasters filled with one RGBA colour."""

    def _make(width: int, height: int, rgba=(128, 128, 128, 255)) -> np.ndarray:
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = rgba
        return pixels

    return _make


@pytest.fixture
def random_rgba():
    """Return a factory for reproducible noisy rasters."""

    def _make(width: int, height: int, *, seed: int = 7, opaque: bool = True) -> np.ndarray:
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        if opaque:
            pixels[..., 3] = 255
        return pixels

    return _make


@pytest.fixture
def png_bytes():
    """Return a factory encoding an RGBA array as PNG bytes."""

    import io

    from PIL import Image

    def _encode(pixels: np.ndarray) -> bytes:
        buffer = io.BytesIO()
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(buffer, format="PNG")
        return buffer.getvalue()

    return _encode
