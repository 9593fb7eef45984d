"""
Components and their per-component stores.

A component owns an append-only EdgeStore, a ResidueStore of symbolic anchors,
outcome counters and a bounded experiential log. Cross-component references
(edge endpoints, representative) are held by id and resolved through the
registry.
"""

from typing import Any, Iterator, List, Optional, Sequence

from .experience import ExperientialLog, TemporalSource
from .metrics import OutcomeMetrics
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
    UNRESOLVED,
    REPRESENTATIVE,
)


class EdgeStore:
    """Ordered sequence of invocation edges. Appended to, never reordered."""

    def __init__(self, owner_id: ComponentId):
        self.owner_id = owner_id
        self._edges: List[InvocationEdge] = []

    def append(self, callee_id: ComponentId, kind: InvocationKind,
               weight: float) -> InvocationEdge:
        """
        Append an edge from the owner to ``callee_id``.

        The new edge's ``symbol_id`` is its position in the sequence.

        Raises:
            ValueError: If weight is outside [0, 1]
        """
        weight = float(weight)
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"Edge weight must be within [0, 1], got {weight}")
        edge = InvocationEdge(
            symbol_id=len(self._edges),
            caller_id=self.owner_id,
            callee_id=callee_id,
            kind=InvocationKind.parse(kind),
            weight=weight,
        )
        self._edges.append(edge)
        return edge

    def weights(self) -> List[float]:
        return [edge.weight for edge in self._edges]

    def clear(self) -> None:
        self._edges.clear()

    def __getitem__(self, index: int) -> InvocationEdge:
        return self._edges[index]

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[InvocationEdge]:
        return iter(self._edges)


class ResidueStore:
    """The symbolic anchors a component exposes, in declaration order."""

    def __init__(self):
        self._residues: List[SymbolicResidue] = []

    def add(self, anchor: str, context: Any = None,
            activation: Optional[Activation] = None) -> SymbolicResidue:
        residue = SymbolicResidue(anchor=anchor, context=context,
                                  activation=activation)
        self._residues.append(residue)
        return residue

    def extend_copies(self, residues: Sequence[SymbolicResidue]) -> int:
        """
        Append an independent copy of every residue.

        Returns:
            Number of residues appended
        """
        copies = [residue.copy() for residue in residues]
        self._residues.extend(copies)
        return len(copies)

    def anchors(self) -> List[str]:
        return [residue.anchor for residue in self._residues]

    def matching(self, anchor: str) -> Iterator[SymbolicResidue]:
        return (r for r in self._residues if r.anchor == anchor)

    def clear(self) -> None:
        self._residues.clear()

    def __getitem__(self, index: int) -> SymbolicResidue:
        return self._residues[index]

    def __len__(self) -> int:
        return len(self._residues)

    def __iter__(self) -> Iterator[SymbolicResidue]:
        return iter(self._residues)


class Component:
    """
    A node in the linking graph.

    Attributes:
        id: Stable identifier, never reused
        phase: Current resolution phase
        edges: Outgoing invocation edges
        residues: Discoverable anchors
        state: Tagged canonical state
        metrics: Outcome counters
        experience: Recent link events initiated by this component
    """

    def __init__(self, component_id: ComponentId,
                 anchor: Optional[str] = None,
                 experience_capacity: int = 64,
                 clock: Optional[TemporalSource] = None):
        self.id = component_id
        self.phase = Phase.DORMANT
        self.edges = EdgeStore(component_id)
        self.residues = ResidueStore()
        self.state: CanonicalState = UNRESOLVED
        self.metrics = OutcomeMetrics()
        self.experience = ExperientialLog(experience_capacity, clock)
        self.destroyed = False

        if anchor is not None:
            self.residues.add(anchor)

    @property
    def canonical(self) -> bool:
        return isinstance(self.state, Representative)

    @property
    def canonical_ref(self) -> Optional[ComponentId]:
        """Id of this component's representative (itself when canonical)."""
        if isinstance(self.state, Representative):
            return self.id
        if isinstance(self.state, MemberOf):
            return self.state.representative_id
        return None

    def promote(self) -> None:
        """Make this component the representative of its own class."""
        self.state = REPRESENTATIVE

    def join(self, representative: 'Component') -> None:
        """Fold this component into ``representative``'s class."""
        self.state = MemberOf(representative.id)

    def release(self) -> None:
        """Drop owned edges and residues."""
        self.edges.clear()
        self.residues.clear()
        self.destroyed = True

    def __repr__(self) -> str:
        return (f"Component(id={self.id!r}, phase={self.phase.value}, "
                f"edges={len(self.edges)}, residues={len(self.residues)}, "
                f"state={self.state.label})")
