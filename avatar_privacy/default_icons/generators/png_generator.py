from pathlib import Path

from avatar_privacy.default_icons.generators.generator import Generator
from avatar_privacy.lib.image_editor import ImageEditor


class PNGGenerator(Generator):
    """Base class for generators compositing pre-packaged PNG fragments."""

    __slots__ = ('_editor', '_parts_dir')

    extension = 'png'
    mime_type = 'image/png'

    def __init__(self, parts_dir: Path, editor: ImageEditor):
        self._parts_dir = parts_dir
        self._editor = editor
