# sellerdesk/services/exceptions.py

"""
SERVICE ERRORS

Centralized domain errors for the refund, dispute and assignment services.
Input problems use ValidationError / ConflictError from sellerdesk.validation.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for all service failures."""


class UnauthorizedError(ServiceError):
    """Caller does not own the referenced entity. Never carries detail."""

    def __init__(self, message: str = "Not permitted"):
        super().__init__(message)


class NotFoundError(ServiceError):
    """Referenced id does not resolve."""


class InvalidTransitionError(ServiceError):
    """Requested status change is not allowed from the current status."""


class PersistenceFailure(ServiceError):
    """
    The store rejected or failed a write or read.

    `completed` lists the steps of a multi-write operation that were already
    committed when the failure happened, so callers can report partial state.
    """

    def __init__(self, message: str, completed: tuple[str, ...] = ()):
        super().__init__(message)
        self.completed = tuple(completed)
