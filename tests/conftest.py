import os
import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make the sources importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Headless CI has no display server.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PIL import Image  # noqa: E402

from iPortrait.core.raster import SourceRaster  # noqa: E402


@pytest.fixture
def solid_raster():
    """Factory building a single-colour RGBA raster."""

    def _make(width: int, height: int, color=(255, 0, 0, 255)) -> SourceRaster:
        return SourceRaster.from_image(Image.new("RGBA", (width, height), color))

    return _make


@pytest.fixture
def noise_raster():
    """Factory building an opaque raster of uniform random noise."""

    def _make(width: int = 64, height: int = 48, seed: int = 7) -> SourceRaster:
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        pixels[..., 3] = 255
        return SourceRaster(pixels)

    return _make


@pytest.fixture
def red_raster(solid_raster) -> SourceRaster:
    return solid_raster(100, 100)
