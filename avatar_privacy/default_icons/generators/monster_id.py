import logging
from pathlib import Path
from random import Random
from typing import Literal, override

from avatar_privacy.config import STATIC_DIR
from avatar_privacy.default_icons.generators.png_generator import PNGGenerator
from avatar_privacy.lib.image_editor import ImageEditor, Region

_ColorPolicy = Literal['same', 'random', 'specific'] | None

SIZE = 120
PARTS_DIR = STATIC_DIR.joinpath('images/monster-id')
BACKGROUND = 'back.png'

# Composition order, bottom layer first
PART_CATEGORIES: tuple[str, ...] = ('legs', 'hair', 'arms', 'body', 'eyes', 'mouth')

# same: the monster's main color, random: an independent color,
# specific: a hue from the given range, None: keep the original colors
PART_COLORS: dict[str, _ColorPolicy] = {
    'legs': 'same',
    'hair': 'random',
    'arms': 'same',
    'body': 'same',
    'eyes': None,
    'mouth': 'specific',
}
SPECIFIC_HUES: dict[str, tuple[int, int]] = {
    'mouth': (330, 360),
}

# Regions of non-transparent pixels, see get_parts_dimensions()
PARTS_OPTIMIZATION: dict[str, Region] = {
    'legs_1.png': ((40, 80), (84, 112)),
    'legs_2.png': ((36, 84), (88, 112)),
    'legs_3.png': ((38, 82), (84, 116)),
    'hair_1.png': ((40, 80), (22, 38)),
    'hair_2.png': ((45, 75), (12, 38)),
    'hair_3.png': ((36, 84), (18, 40)),
    'arms_1.png': ((20, 100), (46, 82)),
    'arms_2.png': ((16, 104), (42, 74)),
    'arms_3.png': ((13, 107), (51, 61)),
    'body_1.png': ((30, 90), (28, 96)),
    'body_2.png': ((32, 88), (34, 94)),
    'body_3.png': ((24, 96), (40, 92)),
    'body_4.png': ((34, 86), (22, 98)),
    'eyes_1.png': ((43, 77), (45, 59)),
    'eyes_2.png': ((49, 71), (41, 59)),
    'eyes_3.png': ((42, 78), (46, 62)),
    'mouth_1.png': ((48, 72), (69, 79)),
    'mouth_2.png': ((46, 74), (71, 80)),
    'mouth_3.png': ((52, 68), (68, 84)),
}


class MonsterId(PNGGenerator):
    """
    Monster icons composited from body part fragments.

    Every part category is required: a missing background or part aborts the
    whole build, discarding the layers composited so far.
    """

    __slots__ = ('_parts_optimization',)

    def __init__(
        self,
        parts_dir: Path = PARTS_DIR,
        editor: ImageEditor | None = None,
        *,
        parts_optimization: dict[str, Region] = PARTS_OPTIMIZATION,
    ):
        super().__init__(parts_dir, editor if editor is not None else ImageEditor(SIZE))
        self._parts_optimization = parts_optimization

    def locate_parts(self) -> dict[str, list[str]]:
        """
        Find the candidate fragment files of each part category.
        Categories without candidates map to an empty list.
        """
        parts: dict[str, list[str]] = {category: [] for category in PART_CATEGORIES}
        if not self._parts_dir.is_dir():
            logging.warning('Monster parts directory %r not found', str(self._parts_dir))
            return parts

        for path in sorted(self._parts_dir.glob('*.png')):
            category, sep, _ = path.stem.partition('_')
            if sep and category in parts:
                parts[category].append(path.name)
        return parts

    def get_parts_dimensions(self) -> dict[str, Region]:
        """Compute the non-transparent region of every located part."""
        result: dict[str, Region] = {}
        for files in self.locate_parts().values():
            for file in files:
                region = self._editor.get_bounding_box(self._parts_dir.joinpath(file))
                if region is not None:
                    result[file] = region
        return result

    @override
    def build(self, seed: str, size: int) -> bytes | None:
        rng = Random(seed)
        parts = {
            category: rng.choice(files) if files else None
            for category, files in self.locate_parts().items()
        }

        editor = self._editor
        monster = editor.load(self._parts_dir.joinpath(BACKGROUND))
        if monster is None:
            logging.warning('Monster background %r is missing', BACKGROUND)
            return None

        hue = rng.randint(1, 360)
        saturation = rng.randint(25_000, 100_000) / 100_000

        for category, file in parts.items():
            part = (
                editor.load(self._parts_dir.joinpath(file))
                if file is not None
                else None
            )
            if part is None:
                logging.warning('Monster part %r is missing (%s)', category, file)
                return None

            region = self._parts_optimization.get(file)  # pyright: ignore[reportArgumentType]
            policy = PART_COLORS.get(category)
            if policy == 'same':
                editor.colorize(part, hue, saturation, region)
            elif policy == 'random':
                editor.colorize(
                    part,
                    rng.randint(1, 360),
                    rng.randint(25_000, 100_000) / 100_000,
                    region,
                )
            elif policy == 'specific':
                low, high = SPECIFIC_HUES[category]
                editor.colorize(
                    part,
                    rng.randint(low, high),
                    rng.randint(50_000, 100_000) / 100_000,
                    region,
                )

            editor.apply(monster, part)

        logging.debug('Generated monster icon for %r at %dpx', seed, size)
        return editor.get_resized_image_data(monster, size)
