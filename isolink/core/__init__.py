"""Data model of the linker: components, their stores, counters and the registry."""

from .component import Component, EdgeStore, ResidueStore
from .errors import (
    LinkerError,
    AllocationError,
    NotFoundError,
    InvalidPreconditionError,
    ActivationError,
    is_referenced_error,
)
from .experience import ExperientialLog, LinkEvent, INDIRECT_LINK_EVENT
from .metrics import OutcomeMetrics, MetricsSnapshot
from .registry import Registry
from .types import (
    Activation,
    CanonicalState,
    ComponentId,
    InvocationEdge,
    InvocationKind,
    MemberOf,
    Phase,
    Representative,
    SymbolicResidue,
    Unresolved,
    constant_activation,
)

__all__ = [
    "Component",
    "EdgeStore",
    "ResidueStore",
    "Registry",
    "OutcomeMetrics",
    "MetricsSnapshot",
    "ExperientialLog",
    "LinkEvent",
    "INDIRECT_LINK_EVENT",
    "LinkerError",
    "AllocationError",
    "NotFoundError",
    "InvalidPreconditionError",
    "ActivationError",
    "is_referenced_error",
    "Activation",
    "CanonicalState",
    "ComponentId",
    "InvocationEdge",
    "InvocationKind",
    "MemberOf",
    "Phase",
    "Representative",
    "SymbolicResidue",
    "Unresolved",
    "constant_activation",
]
