"""
Error types for the linker.

Resolution failure ("no qualifying link") is not an error and never raises;
these types cover resource, lookup and precondition faults only.
"""

from typing import Optional, Any, Dict


class LinkerError(Exception):
    """
    Base exception for all linker errors.

    Carries a structured ``details`` dict for reporting.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize linker error.

        Args:
            message: Error message
            details: Optional detailed error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class AllocationError(LinkerError):
    """Raised when a component cannot be admitted because capacity is exhausted."""

    def __init__(self, message: str,
                 capacity: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize allocation error.

        Args:
            message: Error message
            capacity: The limit that was hit
            details: Additional error context
        """
        super().__init__(message, details)
        self.capacity = capacity
        self.details.update({'capacity': capacity})


class NotFoundError(LinkerError, KeyError):
    """Raised on lookup or destroy of an unknown component id."""

    def __init__(self, component_id: Any,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize not-found error.

        Args:
            component_id: The id that was looked up
            details: Additional error context
        """
        super().__init__(f"No component with id {component_id!r}", details)
        self.component_id = component_id
        self.details.update({'component_id': component_id})


class InvalidPreconditionError(LinkerError):
    """
    Raised when an operation's precondition does not hold.

    Covers destroying a component that is still some other component's
    representative, reusing a live or retired id, and mutating the registry
    from inside an activation capability.
    """

    def __init__(self, message: str,
                 operation: str = 'general',
                 component_id: Any = None,
                 referenced_by: Optional[list] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize precondition error.

        Args:
            message: Error message
            operation: Operation that was rejected ('destroy', 'create', ...)
            component_id: Component the operation targeted
            referenced_by: Ids of live components that still refer to it
            details: Additional error context
        """
        super().__init__(message, details)
        self.operation = operation
        self.component_id = component_id
        self.referenced_by = list(referenced_by or [])

        self.details.update({
            'operation': operation,
            'component_id': component_id,
            'referenced_by': self.referenced_by
        })


class ActivationError(LinkerError, ValueError):
    """Raised when an activation capability yields a score outside [0, 1]."""

    def __init__(self, message: str,
                 anchor: Optional[str] = None,
                 score: Optional[float] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.anchor = anchor
        self.score = score
        self.details.update({'anchor': anchor, 'score': score})


def is_referenced_error(error: Exception) -> bool:
    """Check if error is a destroy rejected because of live members."""
    return (isinstance(error, InvalidPreconditionError)
            and error.operation == 'destroy' and bool(error.referenced_by))
