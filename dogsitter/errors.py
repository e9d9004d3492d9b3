"""
Errores de dominio que lanzan los servicios.

Los routers no los capturan: main.py registra un handler que los traduce
a respuestas JSON con el status_code de cada clase.
"""
from typing import Any, Optional


class DomainError(Exception):
    """Base de los errores visibles para el usuario."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class UnauthorizedError(DomainError):
    status_code = 401


class PermissionDenied(DomainError):
    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ValidationFailed(DomainError):
    status_code = 400


class InvalidTransition(DomainError):
    status_code = 400


class ConflictError(DomainError):
    status_code = 409
