"""
Инициализация модуля сервисов.

Exports:
    - BaseService: Базовый класс для всех сервисов
    - FixtureInstaller: Сервис установки фикстур
    - install: Установка фикстур одним вызовом
"""

from .base import BaseService
from .installer import FixtureInstaller, OnEach, install

__all__ = [
    "BaseService",
    "FixtureInstaller",
    "OnEach",
    "install",
]
