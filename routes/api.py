"""
Программа: «Spektr» – сервис извлечения цветовых палитр из изображений.
Модуль: routes/api.py – REST-подобные API-маршруты.

Назначение модуля:
- Обработка загрузки изображений и извлечение доминирующих цветов.
- Кластеризация произвольного набора RGB-сэмплов, переданного в JSON.
"""

import random

from PIL import Image, UnidentifiedImageError
from flask import current_app, jsonify, request

from utils.colors import hex_to_rgb, rgb_to_hex
from utils.image_processor import extract_rgb_palette
from utils.kmeans import ColorQuantizer, InvalidInputError


def _api_error(message: str, status: int = 400):
    return jsonify({"success": False, "error": message}), status


def _allowed_file(filename: str) -> bool:
    return (
        "." in filename
        and filename.rsplit(".", 1)[1].lower() in current_app.config["ALLOWED_EXTENSIONS"]
    )


def _make_rng() -> random.Random:
    return random.Random(current_app.config.get("KMEANS_SEED"))


def _clamp_color_count(raw_value: int | None) -> int:
    config = current_app.config
    if raw_value is None:
        return config["DEFAULT_COLOR_COUNT"]
    return max(config["MIN_COLOR_COUNT"], min(config["MAX_COLOR_COUNT"], raw_value))


def _validate_uploaded_image(file_storage):
    file_storage.stream.seek(0)
    try:
        with Image.open(file_storage.stream) as image:
            image.verify()
    except (UnidentifiedImageError, OSError):
        return _api_error("Файл не является корректным изображением", 400)
    finally:
        file_storage.stream.seek(0)

    try:
        with Image.open(file_storage.stream) as image:
            image_format = (image.format or "").lower()
            width, height = image.size
    except (UnidentifiedImageError, OSError):
        return _api_error("Файл не является корректным изображением", 400)
    finally:
        file_storage.stream.seek(0)

    if image_format not in current_app.config["ALLOWED_IMAGE_FORMATS"]:
        return _api_error("Недопустимый формат изображения", 400)

    if width * height > current_app.config["MAX_IMAGE_PIXELS"]:
        return _api_error("Изображение слишком большое по разрешению", 400)

    return None


def _parse_samples(raw_samples) -> list:
    """Принимает сэмплы как [r, g, b] или HEX-строки."""
    if not isinstance(raw_samples, list):
        raise InvalidInputError("Поле samples должно быть списком")

    samples = []
    for raw in raw_samples:
        if isinstance(raw, str):
            try:
                samples.append(hex_to_rgb(raw))
            except ValueError as exc:
                raise InvalidInputError(str(exc)) from exc
        elif isinstance(raw, list) and all(isinstance(c, int) and not isinstance(c, bool) for c in raw):
            samples.append(raw)
        else:
            raise InvalidInputError("Сэмпл должен быть списком [r, g, b] или HEX-строкой")
    return samples


def register_routes(app):
    @app.route("/api/upload", methods=["POST"])
    def upload_image():
        """Обработчик загрузки изображения и извлечения палитры."""
        try:
            if "image" not in request.files:
                return _api_error("Файл не был загружен", 400)

            file = request.files["image"]

            # Проверяем, что пользователь действительно выбрал файл
            if file.filename == "":
                return _api_error("Файл не выбран", 400)

            # Проверяем тип файла по расширению
            if not _allowed_file(file.filename):
                return _api_error("Недопустимый тип файла", 400)

            validation_error = _validate_uploaded_image(file)
            if validation_error is not None:
                return validation_error

            # Количество цветов, запрошенное пользователем
            color_count = _clamp_color_count(request.form.get("color_count", type=int))

            try:
                colors = extract_rgb_palette(
                    file.stream,
                    color_count,
                    sample_size=app.config["IMAGE_SAMPLE_SIZE"],
                    max_iterations=app.config["KMEANS_MAX_ITERATIONS"],
                    rng=_make_rng(),
                )
            except Exception:
                current_app.logger.exception("Ошибка извлечения цветов из изображения")
                return _api_error("Не удалось извлечь цвета из изображения", 500)

            return jsonify(
                {
                    "success": True,
                    "palette": [rgb_to_hex(color) for color in colors],
                    "colors": [list(color) for color in colors],
                }
            )

        except Exception:
            current_app.logger.exception("Критическая ошибка обработки загрузки")
            return _api_error("Внутренняя ошибка сервера", 500)

    @app.route("/api/cluster", methods=["POST"])
    def cluster_samples():
        """Кластеризует переданные RGB-сэмплы и возвращает центроиды."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _api_error("Ожидается JSON-объект", 400)

        k = data.get("k", app.config["DEFAULT_COLOR_COUNT"])
        if isinstance(k, bool) or not isinstance(k, int):
            return _api_error("Поле k должно быть целым числом", 400)
        if k > app.config["MAX_COLOR_COUNT"]:
            return _api_error(f"Поле k не может превышать {app.config['MAX_COLOR_COUNT']}", 400)

        try:
            samples = _parse_samples(data.get("samples"))
            if len(samples) > app.config["MAX_SAMPLES"]:
                return _api_error("Слишком много сэмплов", 400)

            quantizer = ColorQuantizer(
                rng=_make_rng(),
                max_iterations=app.config["KMEANS_MAX_ITERATIONS"],
            )
            centroids = quantizer.cluster(k, samples)
        except InvalidInputError as exc:
            return _api_error(str(exc), 400)
        except Exception:
            current_app.logger.exception("Ошибка кластеризации сэмплов")
            return _api_error("Внутренняя ошибка сервера", 500)

        return jsonify(
            {
                "success": True,
                "centroids": [list(centroid) for centroid in centroids],
                "palette": [rgb_to_hex(centroid) for centroid in centroids],
            }
        )
