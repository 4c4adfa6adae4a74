# pyright: reportUnknownVariableType=false

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

import imageio.v3 as iio
import numpy as np
from numpy.typing import NDArray
from PIL import Image as PILImage

log = logging.getLogger(__name__)


class DecodeError(ValueError):
    pass


@dataclass(frozen=True, eq=False)
class Image:
    """A decoded bitmap. Pixels are always stored as (height, width, 4) RGBA
    bytes, whatever the layout of the source file."""

    pixels: NDArray[np.uint8]

    @classmethod
    def from_array(cls, array: NDArray) -> "Image":
        pixels = np.asarray(array)
        if pixels.dtype == np.uint16:
            pixels = (pixels >> 8).astype(np.uint8)
        elif pixels.dtype != np.uint8:
            pixels = np.clip(pixels, 0, 255).astype(np.uint8)

        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        if pixels.ndim != 3:
            raise DecodeError(f"expected a 2 or 3 dimensional array, got {pixels.shape}")

        height, width, channels = pixels.shape
        opaque = np.full((height, width, 1), 255, dtype=np.uint8)
        if channels == 1:
            # gray
            pixels = np.concatenate([pixels, pixels, pixels, opaque], axis=2)
        elif channels == 2:
            # gray + alpha
            gray, alpha = pixels[:, :, :1], pixels[:, :, 1:]
            pixels = np.concatenate([gray, gray, gray, alpha], axis=2)
        elif channels == 3:
            pixels = np.concatenate([pixels, opaque], axis=2)
        elif channels != 4:
            raise DecodeError(f"unsupported channel count {channels}")
        return cls(np.ascontiguousarray(pixels))

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def area(self) -> int:
        return self.width * self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x].tolist()
        return r, g, b, a

    def premultiplied(self) -> NDArray[np.uint32]:
        return premultiply(self.pixels)


def premultiply(pixels: NDArray[np.uint8]) -> NDArray[np.uint32]:
    """Widens 8-bit RGBA to 16-bit channels and multiplies the colors by
    alpha. Two pixels look the same exactly when their premultiplied values
    match, so every fully transparent pixel equals transparent black.
    """
    wide = pixels.astype(np.uint32) * 257
    alpha = wide[..., 3:4]
    out = wide.copy()
    out[..., :3] = wide[..., :3] * alpha // 0xFFFF
    return out


def is_empty_pixel(pixel: NDArray[np.uint8]) -> bool:
    return not premultiply(np.asarray(pixel, dtype=np.uint8)).any()


def load_png(file: Union[str, Path]) -> Image:
    path = Path(file)
    if not path.is_file():
        raise FileNotFoundError(f"Couldn't load the file {path}")
    try:
        with PILImage.open(path, formats=["PNG"]) as pil_image:
            # animated PNGs decode to their first frame
            pil_image.seek(0)
            if pil_image.mode in ("I", "I;16"):
                pixels = np.asarray(pil_image).astype(np.uint16)
            else:
                pixels = np.asarray(pil_image.convert("RGBA"))
    except (OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Couldn't decode the PNG {path}") from exc
    image = Image.from_array(pixels)
    log.debug("decoded %s (%dx%d)", path, image.width, image.height)
    return image


def save_png(image: Union[Image, NDArray], output_file: Union[str, Path]):
    if isinstance(image, Image):
        pixels = image.pixels
    else:
        pixels = Image.from_array(image).pixels
    iio.imwrite(output_file, pixels, extension=".png")
