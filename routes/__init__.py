"""
Модуль: `routes/__init__.py`.
Назначение: Регистрация маршрутов приложения по модулям.
"""
