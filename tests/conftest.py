import io

import pytest
from PIL import Image

from app import create_app


class ScriptedRandom:
    """Источник случайности с заранее заданной последовательностью значений."""

    def __init__(self, floats=(), indices=()):
        self.floats = list(floats)
        self.indices = list(indices)

    def random(self):
        return self.floats.pop(0)

    def randrange(self, stop):
        index = self.indices.pop(0)
        assert 0 <= index < stop
        return index


def make_image(colors, size=(40, 40), mode="RGB"):
    """Изображение из вертикальных полос заданных цветов."""
    image = Image.new(mode, size)
    stripe = size[0] // len(colors)
    for i, color in enumerate(colors):
        image.paste(color, (i * stripe, 0, size[0] if i == len(colors) - 1 else (i + 1) * stripe, size[1]))
    return image


def image_bytes(image, image_format="PNG") -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def app():
    return create_app({"TESTING": True, "KMEANS_SEED": 7, "LOG_LEVEL": "DEBUG"})


@pytest.fixture
def client(app):
    return app.test_client()
