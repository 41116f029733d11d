"""
Модуль: `utils/__init__.py`.
Назначение: Вспомогательные модули обработки цветов и изображений.
"""
