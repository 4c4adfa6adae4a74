import numpy as np
import pytest

from pngdiff.png import save_png

WHITE = (255, 255, 255, 255)
RED = (200, 30, 30, 255)
CLEAR = (0, 0, 0, 0)


def solid(width, height, color=WHITE):
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


@pytest.fixture
def write_png(tmp_path):
    def write(name, pixels):
        path = tmp_path / name
        save_png(pixels, path)
        return path

    return write
