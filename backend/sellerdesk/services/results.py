# Overview: Uniform result envelope returned to form handlers and API routes.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from ..validation import ConflictError, ValidationError
from .exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PersistenceFailure,
    UnauthorizedError,
)

# Error type -> (envelope type name, HTTP status)
ERROR_KINDS: dict[type, tuple[str, int]] = {
    ValidationError: ("ValidationError", 400),
    UnauthorizedError: ("Unauthorized", 403),
    NotFoundError: ("NotFound", 404),
    InvalidTransitionError: ("InvalidTransition", 409),
    ConflictError: ("Conflict", 409),
    PersistenceFailure: ("PersistenceFailure", 500),
}

HANDLED_ERRORS = tuple(ERROR_KINDS)


def _serialize(data: Any) -> Any:
    if data is None or isinstance(data, (dict, str, int, float, bool)):
        return data
    if isinstance(data, (list, tuple)):
        return [_serialize(item) for item in data]
    if hasattr(data, "to_dict"):
        return data.to_dict()
    return data


@dataclass
class OperationResult:
    """{success, data?, error?} envelope."""
    success: bool
    data: Any = None
    error: dict | None = None
    status_code: int = 200

    @classmethod
    def ok(cls, data: Any = None, status_code: int = 200) -> "OperationResult":
        return cls(success=True, data=_serialize(data), status_code=status_code)

    @classmethod
    def from_error(cls, exc: Exception, data: Any = None) -> "OperationResult":
        kind, status = "Error", 500
        for error_type, (name, code) in ERROR_KINDS.items():
            if isinstance(exc, error_type):
                kind, status = name, code
                break
        error = {"type": kind, "message": str(exc)}
        completed = getattr(exc, "completed", None)
        if completed:
            error["completed"] = list(completed)
        return cls(success=False, data=_serialize(data), error=error, status_code=status)

    @classmethod
    def capture(cls, func: Callable[..., Any], *args, status_code: int = 200, **kwargs) -> "OperationResult":
        """
        Run a service call and wrap its outcome.

        Only the service error taxonomy is converted; anything else propagates
        so the caller can log it.
        """
        try:
            value = func(*args, **kwargs)
        except HANDLED_ERRORS as exc:
            return cls.from_error(exc)
        if isinstance(value, OperationResult):
            return value
        return cls.ok(value, status_code=status_code)

    def to_dict(self) -> dict:
        body: dict = {"success": self.success}
        if self.data is not None:
            body["data"] = self.data
        if self.error is not None:
            body["error"] = self.error
        return body

    def to_response(self) -> tuple[dict, int]:
        return self.to_dict(), self.status_code


@dataclass
class MappingOp:
    """One planned add/remove of a product mapping."""
    kind: str      # "category" or "tag"
    action: str    # "add" or "remove"
    target_id: int
    error: str | None = None

    def to_dict(self) -> dict:
        data = {"kind": self.kind, "action": self.action, "target_id": self.target_id}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class ReconcileResult:
    """
    Outcome of one assignment reconciliation.

    added/removed hold the ops that were applied and kept; failed holds the
    ops the store rejected. rolled_back is True when an atomic run was undone.
    """
    product_id: int
    added: list[MappingOp] = field(default_factory=list)
    removed: list[MappingOp] = field(default_factory=list)
    failed: list[MappingOp] = field(default_factory=list)
    rolled_back: bool = False

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def mutation_count(self) -> int:
        return len(self.added) + len(self.removed)

    def record(self, op: MappingOp) -> None:
        if op.action == "add":
            self.added.append(op)
        else:
            self.removed.append(op)

    def ids(self, kind: str, action: str) -> set[int]:
        bucket = self.added if action == "add" else self.removed
        return {op.target_id for op in bucket if op.kind == kind}

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "success": self.success,
            "rolled_back": self.rolled_back,
            "added": [op.to_dict() for op in self.added],
            "removed": [op.to_dict() for op in self.removed],
            "failed": [op.to_dict() for op in self.failed],
        }
