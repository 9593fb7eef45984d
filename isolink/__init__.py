"""isolink - Isomorphic component linker with indirect-link resolution."""

__version__ = "0.1.0"

from .config import LinkerConfig
from .core import (
    Component,
    InvocationKind,
    Phase,
    constant_activation,
    LinkerError,
    AllocationError,
    NotFoundError,
    InvalidPreconditionError,
    ActivationError,
)
from .engine import Linker

__all__ = [
    "Linker",
    "LinkerConfig",
    "Component",
    "InvocationKind",
    "Phase",
    "constant_activation",
    "LinkerError",
    "AllocationError",
    "NotFoundError",
    "InvalidPreconditionError",
    "ActivationError",
    "__version__",
]
