import logging
from random import Random
from typing import override

import cython

from avatar_privacy.default_icons.generators.generator import Generator


def _hsl_to_rgb(h: cython.double, s: cython.double, l: cython.double) -> str:
    """
    Convert HSL to RGB hex string.
    h: hue [0, 360)
    s: saturation [0, 1]
    l: lightness [0, 1]
    """
    c: cython.double = (1 - abs(2 * l - 1)) * s
    x: cython.double = c * (1 - abs((h / 60) % 2 - 1))
    m: cython.double = l - c / 2

    r1: cython.double
    g1: cython.double
    b1: cython.double
    if h < 60:
        r1, g1, b1 = c, x, 0
    elif h < 120:
        r1, g1, b1 = x, c, 0
    elif h < 180:
        r1, g1, b1 = 0, c, x
    elif h < 240:
        r1, g1, b1 = 0, x, c
    elif h < 300:
        r1, g1, b1 = x, 0, c
    else:
        r1, g1, b1 = c, 0, x

    r = round((r1 + m) * 255)
    g = round((g1 + m) * 255)
    b = round((b1 + m) * 255)
    return f'{r:02x}{g:02x}{b:02x}'


# Shape definitions as SVG paths (viewBox 0 0 100 100)
_SHAPE_DEFS = {
    'ellipse': '<path fill-rule="evenodd" clip-rule="evenodd" d="M50 90a40 40 0 1 0 0-80 40 40 0 0 0 0 80Zm0 10A50 50 0 1 0 50 0a50 50 0 0 0 0 100Z" fill="#{color}"/>',
    'ellipseFilled': '<path d="M100 50A50 50 0 1 1 0 50a50 50 0 0 1 100 0Z" fill="#{color}"/>',
    'line': '<path fill="#{color}" d="M45-150h10v400H45z"/>',
    'polygon': '<path fill-rule="evenodd" clip-rule="evenodd" d="M50 7 0 93.6h100L50 7Zm0 20L17.3 83.6h65.4L50 27Z" fill="#{color}"/>',
    'polygonFilled': '<path d="m50 7 50 86.6H0L50 7Z" fill="#{color}"/>',
    'rectangle': '<path fill-rule="evenodd" clip-rule="evenodd" d="M90 10H10v80h80V10ZM0 0v100h100V0H0Z" fill="#{color}"/>',
    'rectangleFilled': '<path d="M0 0h100v100H0V0Z" fill="#{color}"/>',
}

# (scale, translation, candidate shapes, max offset x, max offset y, max rotation)
_LAYERS: tuple[tuple[str, str, tuple[str, ...], int, int, int], ...] = (
    ('1.2', '-10', ('rectangleFilled', 'ellipseFilled', 'polygonFilled'), 65, 45, 160),
    ('.8', '10', ('rectangleFilled', 'ellipseFilled', 'polygonFilled', 'line'), 40, 40, 180),
    ('.4', '30', tuple(_SHAPE_DEFS), 25, 25, 180),
)


class Shapes(Generator):
    """Geometric icons made of three rotated shapes over a complementary palette."""

    __slots__ = ()

    extension = 'svg'
    mime_type = 'image/svg+xml'

    @override
    def build(self, seed: str, size: int) -> bytes | None:
        rng = Random(seed)

        # Background: primary color
        primary_h = rng.random() * 360
        primary_s = 0.6 + rng.random() * 0.2
        primary_l = 0.7 + rng.random() * 0.1
        bg_color = _hsl_to_rgb(primary_h, primary_s, primary_l)

        colors = (
            # Large shape: analogous
            _hsl_to_rgb(
                (primary_h + 30) % 360,
                0.6 + rng.random() * 0.1,
                0.35 + rng.random() * 0.2,
            ),
            # Medium shape: complementary
            _hsl_to_rgb(
                (primary_h + 180) % 360,
                0.6 + rng.random() * 0.1,
                0.35 + rng.random() * 0.2,
            ),
            # Small shape: lighter primary
            _hsl_to_rgb(primary_h, primary_s, primary_l + 0.1),
        )

        layers: list[str] = []
        for (scale, translate, shapes, max_x, max_y, max_rotation), color in zip(
            _LAYERS, colors, strict=True
        ):
            shape = _SHAPE_DEFS[rng.choice(shapes)].format(color=color)
            offset_x = rng.randint(-max_x, max_x)
            offset_y = rng.randint(-max_y, max_y)
            rotation = rng.randint(-max_rotation, max_rotation)
            layers.append(
                f'<g transform="matrix({scale} 0 0 {scale} {translate} {translate})">\n'
                f'<g transform="translate(50 50) rotate({rotation}) translate({offset_x} {offset_y}) translate(-50 -50)">\n'
                f'{shape}\n'
                '</g>\n'
                '</g>\n'
            )

        svg = (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" viewBox="0 0 100 100">\n'
            f'<rect width="100" height="100" fill="#{bg_color}"/>\n'
            f'{"".join(layers)}'
            '</svg>'
        )
        logging.debug('Generated shapes icon for %r at %dpx', seed, size)
        return svg.encode()
