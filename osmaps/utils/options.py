"""
Утилиты для подготовки параметров карт.
"""
from typing import Any, Optional

from osmaps.config.settings import settings


def deep_merge(*sources: Optional[dict]) -> dict:
    """
    Рекурсивно объединяет словари в новый словарь.

    Значения из более поздних источников перекрывают более ранние,
    вложенные словари объединяются, а не заменяются. Исходные словари
    не изменяются. None-источники пропускаются.

    Examples:
        >>> deep_merge({"zoom": 8, "style": {"a": 1}}, {"style": {"b": 2}})
        {'zoom': 8, 'style': {'a': 1, 'b': 2}}
    """
    result: dict = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            current = result.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                result[key] = deep_merge(current, value)
            elif isinstance(value, dict):
                result[key] = deep_merge(value)
            else:
                result[key] = value
    return result


def parse_zoom(zoom: Any, default: Optional[int] = None) -> int:
    """
    Приводит масштаб к целому числу.

    Некорректное или нулевое значение заменяется масштабом по умолчанию.

    Examples:
        >>> parse_zoom("12")
        12
        >>> parse_zoom("abc", default=8)
        8
    """
    if default is None:
        default = settings.DEFAULT_ZOOM
    try:
        value = int(float(zoom))
    except (TypeError, ValueError, OverflowError):
        return default
    return value or default
