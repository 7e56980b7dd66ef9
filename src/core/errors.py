"""
Классификация ошибок резолвера.

Ожидаемые деградации (нет совпадения, исчерпан лимит шагов, сетевой сбой
с фолбэком) не выбрасываются, а кодируются в поле ``error`` результата.
Исключениями остаются только пустой ввод и сбои транспорта внутри фетчера.
"""

from __future__ import annotations


class ErrorKind:
    """Константы кодов ошибок, возвращаемых в ResolutionResult.error"""
    INPUT_ERROR = "input_error"
    NETWORK_ERROR = "network_error"
    UNRESOLVED = "unresolved"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    EXTRACTION_MISS = "extraction_miss"


class InputError(ValueError):
    """Пустой или отсутствующий URL: отклоняется до запуска резолвера."""

    kind = ErrorKind.INPUT_ERROR


class FetchError(RuntimeError):
    """
    Сбой исходящего HTTP-запроса (таймаут, соединение, слишком много редиректов).

    Выбрасывается только фетчером и всегда перехватывается резолвером.
    """

    kind = ErrorKind.NETWORK_ERROR

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url
