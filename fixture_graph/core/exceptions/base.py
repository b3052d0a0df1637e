"""
Базовое исключение пакета fixture_graph.

Все ошибки построения, разрешения и сохранения фикстур наследуются
от BaseFixtureException и несут единый набор атрибутов:
detail, error_type и extra.
"""

from typing import Any, Dict, Optional


class BaseFixtureException(Exception):
    """
    Базовый класс для всех исключений работы с фикстурами.

    Attributes:
        detail (str): Подробное сообщение об ошибке.
        error_type (str): Машиночитаемый тип ошибки.
        extra (Dict[str, Any]): Дополнительный контекст (модель, поле и т.п.).
    """

    def __init__(
        self,
        detail: str,
        error_type: str = "fixture_error",
        extra: Optional[Dict[str, Any]] = None,
    ):
        """
        Инициализация BaseFixtureException.

        Args:
            detail (str): Сообщение об ошибке.
            error_type (str): Тип ошибки.
            extra (Dict, optional): Дополнительные данные.
        """
        self.detail = detail
        self.error_type = error_type
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> Dict[str, Any]:
        """Представление ошибки в виде словаря (для логов и отчётов)."""
        return {
            "detail": self.detail,
            "error_type": self.error_type,
            "extra": self.extra,
        }
