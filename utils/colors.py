"""
Программа: «Spektr» – сервис извлечения цветовых палитр из изображений.
Модуль: utils/colors.py – преобразование цветов между RGB и HEX.
"""

import re

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6})$")


def rgb_to_hex(rgb) -> str:
    """Преобразует RGB-кортеж в строку вида #rrggbb."""
    r, g, b = (int(channel) for channel in rgb)
    for channel in (r, g, b):
        if not 0 <= channel <= 255:
            raise ValueError(f"Значение канала вне диапазона 0..255: {channel}")
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """Преобразует HEX-цвет вида #RRGGBB в RGB-кортеж."""
    match = _HEX_PATTERN.match(color.strip())
    if not match:
        raise ValueError(f"Некорректный HEX-цвет: {color!r}")
    normalized = match.group(1)
    return (
        int(normalized[0:2], 16),
        int(normalized[2:4], 16),
        int(normalized[4:6], 16),
    )
