import logging
from colorsys import hls_to_rgb, rgb_to_hls
from io import BytesIO
from pathlib import Path

import cython
from PIL import Image
from PIL.Image import Image as PILImage
from PIL.Image import Resampling

# ((x_min, x_max), (y_min, y_max)), both bounds inclusive
Region = tuple[tuple[int, int], tuple[int, int]]


class ImageEditor:
    """
    Low-level image operations for fragment-based icon generators.

    All fragments are normalized to a square working canvas before they are
    colorized or composited.
    """

    __slots__ = ('canvas_size',)

    def __init__(self, canvas_size: int):
        self.canvas_size = canvas_size

    def create_canvas(self) -> PILImage:
        """Create a fully transparent working canvas."""
        return Image.new('RGBA', (self.canvas_size, self.canvas_size), (0, 0, 0, 0))

    def load(self, path: Path) -> PILImage | None:
        """
        Load and decode an image fragment.
        Returns None if the file is missing or cannot be decoded.
        """
        try:
            with Image.open(path) as img:
                layer = img.convert('RGBA')
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError):
            logging.warning('Failed to load image fragment %r', path.name)
            return None

        canvas_size = self.canvas_size
        if layer.size != (canvas_size, canvas_size):
            logging.debug(
                'Normalizing fragment %r from %dx%d', path.name, *layer.size
            )
            layer = layer.resize((canvas_size, canvas_size), Resampling.LANCZOS)
        return layer

    def colorize(
        self,
        img: PILImage,
        hue: cython.double,
        saturation: cython.double,
        region: Region | None,
    ) -> None:
        """
        Replace hue and saturation of the image in-place, preserving lightness.

        Only the given region is processed; without a region the image is left
        unchanged. Transparent and pure black (outline) pixels are never touched.
        """
        if region is None:
            return

        width: cython.int
        height: cython.int
        width, height = img.size
        (x_min, x_max), (y_min, y_max) = region
        x_start: cython.int = max(x_min, 0)
        x_end: cython.int = min(x_max, width - 1)
        y_start: cython.int = max(y_min, 0)
        y_end: cython.int = min(y_max, height - 1)

        h: cython.double = (hue % 360) / 360
        s: cython.double = min(max(saturation, 0.0), 1.0)
        pixels = img.load()
        x: cython.int
        y: cython.int

        for x in range(x_start, x_end + 1):
            for y in range(y_start, y_end + 1):
                r, g, b, a = pixels[x, y]  # pyright: ignore[reportOptionalSubscript]
                if not a or not (r or g or b):
                    continue

                _, l, _ = rgb_to_hls(r / 255, g / 255, b / 255)
                nr, ng, nb = hls_to_rgb(h, l, s)
                pixels[x, y] = (  # pyright: ignore[reportOptionalSubscript]
                    round(nr * 255),
                    round(ng * 255),
                    round(nb * 255),
                    a,
                )

    def apply(self, base: PILImage, layer: PILImage) -> None:
        """Composite the layer onto the base image in-place."""
        base.alpha_composite(layer)

    def get_resized_image_data(
        self, img: PILImage, size: int, format: str = 'PNG'
    ) -> bytes:
        """Resize the image to size x size pixels and encode it."""
        if img.size != (size, size):
            img = img.resize((size, size), Resampling.LANCZOS)

        buffer = BytesIO()
        img.save(buffer, format=format, optimize=True)
        return buffer.getvalue()

    @staticmethod
    def get_bounding_box(path: Path) -> Region | None:
        """
        Get the region of non-transparent pixels of an image file.
        Returns None if the file cannot be read or is fully transparent.
        """
        try:
            with Image.open(path) as img:
                bbox = img.convert('RGBA').getchannel('A').getbbox()
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError):
            return None

        if bbox is None:
            return None
        left, upper, right, lower = bbox
        return (left, right - 1), (upper, lower - 1)
