"""
Название: «Spektr»
Язык: Python (Flask)
Краткое описание: сервис извлечения цветовой палитры из изображений методом k-means
"""

import logging
import os
import random

import click
from flask import Flask
from flask.logging import default_handler

from config import Config
from extensions import cors
from routes.api import register_routes as register_api_routes
from utils.image_processor import extract_colors_from_image


def create_app(overrides: dict | None = None) -> Flask:
    """Фабрика приложения, собирающая все модули воедино."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])
    # Сообщения utils.* идут в тот же обработчик, что и логи приложения
    utils_logger = logging.getLogger("utils")
    utils_logger.setLevel(app.config["LOG_LEVEL"])
    utils_logger.addHandler(default_handler)

    if app.config["CORS_ENABLED"]:
        cors.init_app(
            app,
            resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        )

    # Регистрация роутов по модулям
    register_api_routes(app)

    @app.after_request
    def apply_security_headers(response):
        """Добавляет к ответу заголовки безопасности."""
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Permissions-Policy", "camera=(), microphone=(), geolocation=()")
        return response

    @app.errorhandler(413)
    def request_too_large(error):
        return {"success": False, "error": "Файл слишком большой. Максимальный размер: 16 МБ"}, 413

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    @app.cli.command("palette")
    @click.argument("images", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
    @click.option("--colors", "num_colors", default=None, type=int, help="Количество цветов палитры.")
    @click.option("--seed", default=None, type=int, help="Зерно генератора для воспроизводимого результата.")
    def palette_command(images, num_colors, seed):
        """Печатает палитру для каждого переданного изображения."""
        if num_colors is None:
            num_colors = app.config["DEFAULT_COLOR_COUNT"]
        if num_colors < 1:
            raise click.BadParameter("должно быть положительным", param_hint="--colors")
        if seed is None:
            seed = app.config["KMEANS_SEED"]

        for path in images:
            colors = extract_colors_from_image(
                path,
                num_colors,
                sample_size=app.config["IMAGE_SAMPLE_SIZE"],
                max_iterations=app.config["KMEANS_MAX_ITERATIONS"],
                rng=random.Random(seed),
            )
            click.echo(f"{path}: {' '.join(colors)}")

    return app


app = create_app()


if __name__ == "__main__":
    is_production = os.environ.get("FLASK_ENV", "").lower() == "production"
    app.run(debug=not is_production)
