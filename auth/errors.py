"""
auth/errors.py -- Error taxonomy for the credential service.

Two families:
  ConfigurationError is raised. It means the deployment is broken (no signing
      secret) and is never shown to the end client -- the API's catch-all
      handler logs it and returns a generic 500.

  ServiceError is returned inside Err(...). It is a user-facing outcome with a
      stable kind and a normalized, human-readable message. Raw persistence
      errors are converted by normalize_error() before they leave the service.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger("pawpass.auth")


class ConfigurationError(RuntimeError):
    """The process is missing configuration required to issue credentials."""


class RecordValidationError(ValueError):
    """Raised by UserStore when a record fails field validation.

    errors maps field name -> human-readable message, in field order.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication_failed"


# HTTP status per kind. Kept here so every transport maps kinds the same way.
STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AUTHENTICATION: 401,
}


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


DUPLICATE_EMAIL_MESSAGE = "An account with that email address already exists."
GENERIC_REGISTRATION_MESSAGE = "Registration failed. Please check your details and try again."


def normalize_error(exc: Exception) -> ServiceError:
    """Convert a persistence failure into a user-facing ServiceError.

    Field validation messages are already written for humans and are passed
    through. Driver-level messages are not: they name tables and constraints,
    so they are logged and replaced with a fixed message.
    """
    if isinstance(exc, RecordValidationError):
        return ServiceError(ErrorKind.VALIDATION, " ".join(exc.errors.values()))
    if isinstance(exc, IntegrityError):
        return ServiceError(ErrorKind.CONFLICT, DUPLICATE_EMAIL_MESSAGE)
    if isinstance(exc, SQLAlchemyError):
        logger.error("Persistence failure during registration: %s", exc)
        return ServiceError(ErrorKind.VALIDATION, GENERIC_REGISTRATION_MESSAGE)
    raise TypeError(f"normalize_error() cannot handle {type(exc).__name__}") from exc
