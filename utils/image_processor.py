"""
Программа: «Spektr» – сервис извлечения цветовых палитр из изображений.
Модуль: utils/image_processor.py – обработка изображений.

Назначение модуля:
- Открытие и предварительная обработка изображений.
- Выделение доминирующих цветов с помощью k-means (utils.kmeans).
- Преобразование найденных цветов в HEX-представление.
"""

import logging

import numpy as np
from PIL import Image

from utils.colors import rgb_to_hex
from utils.kmeans import DEFAULT_MAX_ITERATIONS, ColorQuantizer

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 200


def extract_pixels(image: Image.Image, sample_size: int = DEFAULT_SAMPLE_SIZE) -> np.ndarray:
    """Возвращает пиксели изображения массивом (n, 3) без альфа-канала."""
    img = image.convert("RGB")
    if sample_size and (img.width > sample_size or img.height > sample_size):
        img.thumbnail((sample_size, sample_size))
        logger.debug("Изображение уменьшено до %sx%s для ускорения обработки", img.width, img.height)
    return np.asarray(img, dtype=np.uint8).reshape(-1, 3)


def extract_rgb_palette(
    source,
    num_colors: int = 6,
    *,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    rng=None,
) -> list[tuple[int, int, int]]:
    """Извлекает num_colors центроидов из изображения (путь или файловый объект)."""
    with Image.open(source) as img:
        logger.debug("Изображение открыто, размер: %s", img.size)
        pixels = extract_pixels(img, sample_size)

    logger.debug("Количество пикселей для кластеризации: %d", pixels.shape[0])
    quantizer = ColorQuantizer(rng=rng, max_iterations=max_iterations)
    return quantizer.cluster(num_colors, pixels)


def extract_colors_from_image(source, num_colors: int = 6, **options) -> list[str]:
    """Извлекает доминирующие цвета изображения в виде HEX-строк."""
    colors = extract_rgb_palette(source, num_colors, **options)
    hex_colors = [rgb_to_hex(color) for color in colors]
    logger.info("Итоговые HEX-цвета: %s", hex_colors)
    return hex_colors
