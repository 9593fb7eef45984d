"""
Value types shared by the linking engine.

Edges, residues and the tagged canonical state of a component.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union

ComponentId = int

# (context) -> score in [0, 1]
Activation = Callable[[Any], float]


class Phase(Enum):
    """What kind of resolution work is in flight on a component."""
    DORMANT = "dormant"
    WITNESS = "witness"
    TRANSFORM = "transform"
    RESIDUE = "residue"

    @classmethod
    def parse(cls, value: Union[str, 'Phase']) -> 'Phase':
        """Accept a Phase or its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown phase {value!r}; expected one of "
                f"{', '.join(p.value for p in cls)}"
            ) from None


class InvocationKind(Enum):
    """How a caller reaches its callee."""
    DIRECT = "direct"
    INDIRECT = "indirect"
    VIRTUAL = "virtual"
    PHENOMENOLOGICAL = "phenomenological"

    @classmethod
    def parse(cls, value: Union[str, 'InvocationKind']) -> 'InvocationKind':
        """Accept an InvocationKind or its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown invocation kind {value!r}; expected one of "
                f"{', '.join(k.value for k in cls)}"
            ) from None


@dataclass(frozen=True)
class InvocationEdge:
    """Directed edge from caller to callee, endpoints held by id."""
    symbol_id: int
    caller_id: ComponentId
    callee_id: ComponentId
    kind: InvocationKind
    weight: float

    def to_dict(self) -> dict:
        return {
            'symbol_id': self.symbol_id,
            'caller_id': self.caller_id,
            'callee_id': self.callee_id,
            'kind': self.kind.value,
            'weight': self.weight,
        }


@dataclass
class SymbolicResidue:
    """
    A named anchor a component can be discovered by.

    ``activation`` is optional; an inert residue (no activation) can be
    discovered but never authorizes an indirect link.
    """
    anchor: str
    context: Any = None
    activation: Optional[Activation] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.anchor, str) or not self.anchor:
            raise ValueError("Residue anchor must be a non-empty string")

    @property
    def is_inert(self) -> bool:
        return self.activation is None

    def activate(self) -> float:
        """Evaluate the activation capability against this residue's context."""
        if self.activation is None:
            raise ValueError(f"Residue {self.anchor!r} has no activation capability")
        return float(self.activation(self.context))

    def copy(self) -> 'SymbolicResidue':
        """Independent copy; context and activation are shared, not cloned."""
        return SymbolicResidue(
            anchor=str(self.anchor),
            context=self.context,
            activation=self.activation,
        )


# Tagged canonical state. A fresh component is Unresolved until canonicalized.

@dataclass(frozen=True)
class Unresolved:
    """Not yet assigned to an equivalence class."""

    @property
    def label(self) -> str:
        return "unresolved"


@dataclass(frozen=True)
class Representative:
    """The component is the canonical form of its class."""

    @property
    def label(self) -> str:
        return "representative"


@dataclass(frozen=True)
class MemberOf:
    """The component was folded into the class represented by ``representative_id``."""
    representative_id: ComponentId

    @property
    def label(self) -> str:
        return f"member of {self.representative_id}"


CanonicalState = Union[Unresolved, Representative, MemberOf]

UNRESOLVED = Unresolved()
REPRESENTATIVE = Representative()


def constant_activation(score: float) -> Activation:
    """
    Build an activation capability that ignores its context.

    Args:
        score: Score returned on every evaluation

    Returns:
        Activation callable
    """
    score = float(score)

    def activation(context: Any) -> float:
        return score

    activation.score = score  # type: ignore[attr-defined]
    return activation
