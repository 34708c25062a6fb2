"""Error Hierarchy - typed, categorized exceptions for every tree-store failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Codes are stable strings; callers match on `code`, not on message text
    - Guard errors are raised before any write lands
    - details() returns only JSON-safe values (ids rendered with str)

Design Decisions:
    - Single hierarchy with TreeStoreError base: one except clause catches all domain failures
    - ErrorContext as dataclass: observability detail without coupling to the logging setup
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Which layer a caller should blame."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Where the error happened: tenant, node and operation."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    organization_id: str | None = None
    node_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class TreeStoreError(Exception):
    """Base exception for all tree-store errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def details(self) -> dict[str, Any]:
        """Error-specific payload; subclasses add the ids they carry."""
        return {}

    def to_dict(self) -> dict:
        ctx = self.context
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": ctx.timestamp.isoformat(),
                "details": self.details(),
                "context": {
                    "organization_id": ctx.organization_id,
                    "node_id": ctx.node_id,
                    "operation": ctx.operation,
                },
            }
        }


# ─── Guard Errors ────────────────────────────────────────────────

class RootAlreadyExistsError(TreeStoreError):
    """A node without parent_id was created while a root already exists."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Root node already exists",
            "ROOT_ALREADY_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context,
        )


class InvalidParentIdError(TreeStoreError):
    """Referenced parent node does not exist."""
    def __init__(self, parent_id: object, context: ErrorContext | None = None):
        super().__init__(
            f"Parent node '{parent_id}' does not exist",
            "INVALID_PARENT_ID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.parent_id = parent_id

    def details(self) -> dict[str, Any]:
        return {"parent_id": str(self.parent_id)}


class InvalidIdError(TreeStoreError):
    """Target node is not part of its own subtree query."""
    def __init__(self, node_id: object, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid id provided: '{node_id}'",
            "INVALID_ID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.node_id = node_id

    def details(self) -> dict[str, Any]:
        return {"node_id": str(self.node_id)}


class ItemInUseError(TreeStoreError):
    """Node or one of its descendants has a nonzero usage counter."""
    def __init__(self, in_use_ids: list, context: ErrorContext | None = None):
        super().__init__(
            f"{len(in_use_ids)} node(s) in subtree are in use",
            "ITEM_IN_USE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context,
        )
        self.in_use_ids = in_use_ids

    def details(self) -> dict[str, Any]:
        return {"in_use_ids": [str(i) for i in self.in_use_ids]}


class NoIdProvidedError(TreeStoreError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No id provided",
            "NO_ID_PROVIDED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )


class ResourceNotFoundError(TreeStoreError):
    def __init__(
        self, resource_type: str, resource_id: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id

    def details(self) -> dict[str, Any]:
        return {"resource_type": self.resource_type, "resource_id": str(self.resource_id)}


class FieldValidationError(TreeStoreError):
    """Record payload or query field rejected at the store boundary."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.field = field

    def details(self) -> dict[str, Any]:
        return {"field": self.field}


# ─── Consistency / Infrastructure Errors ────────────────────────

class RootNodeNotFoundError(TreeStoreError):
    """Start node missing from its own interval range (intervals out of sync)."""
    def __init__(self, node_id: object, context: ErrorContext | None = None):
        super().__init__(
            f"Root node '{node_id}' not found within its interval range",
            "ROOT_NODE_NOT_FOUND", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context,
        )
        self.node_id = node_id

    def details(self) -> dict[str, Any]:
        return {"node_id": str(self.node_id)}


class DatabaseError(TreeStoreError):
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
