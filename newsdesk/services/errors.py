"""
Ошибки сервисного слоя. Каждая ошибка знает свой HTTP статус и публичное сообщение
"""
from typing import Dict, List, Optional


class ServiceError(Exception):
    """Базовая ошибка сервиса"""
    status_code: int = 500
    message: str = "Internal server error."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Некорректные, отсутствующие или выходящие за границы данные"""
    status_code = 422
    message = "Validation failed"

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, error: str) -> "ValidationError":
        return cls({field: [error]})


class NotFoundError(ServiceError):
    status_code = 404
    message = "Not found"


class AuthError(ServiceError):
    status_code = 401
    message = "Unauthorized access: invalid API key"


class ConflictError(ServiceError):
    status_code = 409
    message = "Conflict"


class BadRequestError(ServiceError):
    status_code = 400
    message = "Bad request"


class StorageError(ServiceError):
    """Ошибка базы данных или файловой системы"""
    status_code = 500
    message = "Database error."


class InternalError(ServiceError):
    status_code = 500
