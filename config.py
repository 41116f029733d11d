"""
Программа: «Spektr» – сервис извлечения цветовых палитр из изображений.
Модуль: config.py – конфигурация приложения.

Назначение модуля:
- Определение базовых параметров приложения Flask.
- Параметры кластеризации (число цветов, предел итераций, размер выборки пикселей).
- Настройка загрузки файлов (максимальный размер, допустимые расширения и форматы).
"""

import os


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Преобразует переменную окружения в bool."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(name: str, default: int | None) -> int | None:
    """Преобразует переменную окружения в int."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str] | None = None) -> list[str]:
    """Преобразует переменную окружения вида 'a,b,c' в список."""
    value = os.environ.get(name)
    if value is None:
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


def _is_production() -> bool:
    """Определяет production-режим по FLASK_ENV."""
    return os.environ.get("FLASK_ENV", "").strip().lower() == "production"


class Config:
    """Базовая конфигурация приложения."""

    _PRODUCTION = _is_production()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO" if _PRODUCTION else "DEBUG").strip().upper()

    CORS_ENABLED = _get_env_bool("CORS_ENABLED", default=False)
    CORS_ORIGINS = _get_env_list(
        "CORS_ORIGINS",
        default=[
            "http://127.0.0.1:5000",
            "http://localhost:5000",
        ],
    )

    MAX_CONTENT_LENGTH = 16 * 1024 * 1024
    ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "webp"}
    ALLOWED_IMAGE_FORMATS = {"png", "jpeg", "webp"}
    MAX_IMAGE_PIXELS = _get_env_int("MAX_IMAGE_PIXELS", 20_000_000)

    DEFAULT_COLOR_COUNT = _get_env_int("DEFAULT_COLOR_COUNT", 6)
    MIN_COLOR_COUNT = _get_env_int("MIN_COLOR_COUNT", 1)
    MAX_COLOR_COUNT = _get_env_int("MAX_COLOR_COUNT", 15)
    KMEANS_MAX_ITERATIONS = _get_env_int("KMEANS_MAX_ITERATIONS", 100)
    IMAGE_SAMPLE_SIZE = _get_env_int("IMAGE_SAMPLE_SIZE", 200)
    MAX_SAMPLES = _get_env_int("MAX_SAMPLES", 100_000)
    # Фиксированное зерно делает палитры воспроизводимыми
    KMEANS_SEED = _get_env_int("KMEANS_SEED", None)
