"""
Canonical-form resolution (isomorphic reduction).

A component is folded into the first canonical component in universe order
that it is isomorphic to, inheriting nothing but donating its residues; if
none matches it becomes the representative of a new equivalence class.

Isomorphism here means equal phase, equal edge count, per-index edge weights
within ``epsilon`` of each other, and residue compatibility as judged by a
pluggable predicate (always compatible unless one is supplied).
"""

import logging
from typing import Callable, Iterable, Optional, Sequence

import numpy as np

from ..core.component import Component
from ..core.types import MemberOf, SymbolicResidue

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT_EPSILON = 0.001

# Absorbs binary rounding of decimal weights so that a difference of exactly
# epsilon (e.g. 0.5 vs 0.501) compares as within tolerance.
WEIGHT_SLACK = 1e-9

ResidueCompatibility = Callable[[Sequence[SymbolicResidue], Sequence[SymbolicResidue]], bool]


def always_compatible(a: Sequence[SymbolicResidue],
                      b: Sequence[SymbolicResidue]) -> bool:
    """Default residue-compatibility predicate: every pair of anchor sets is compatible."""
    return True


def merge_residues(canonical: Component, reducible: Component) -> int:
    """
    Append an independent copy of every residue of ``reducible`` to ``canonical``.

    No deduplication is performed; identical anchors stay discoverable twice.

    Returns:
        Number of residues merged
    """
    merged = canonical.residues.extend_copies(list(reducible.residues))
    logger.debug(
        f"Merged {merged} residue(s) from component {reducible.id!r} "
        f"into {canonical.id!r}"
    )
    return merged


def first_weight_violation(a: Component, b: Component,
                           epsilon: float = DEFAULT_WEIGHT_EPSILON) -> Optional[int]:
    """
    Index of the first edge pair whose weights differ by more than ``epsilon``.

    Both components must have the same number of edges.

    Returns:
        Index of the first violation, or None if all pairs are within tolerance
    """
    if len(a.edges) == 0:
        return None
    diffs = np.abs(np.asarray(a.edges.weights(), dtype=np.float64)
                   - np.asarray(b.edges.weights(), dtype=np.float64))
    violations = np.flatnonzero(diffs > epsilon + WEIGHT_SLACK)
    if violations.size == 0:
        return None
    return int(violations[0])


def isomorphic(a: Component, b: Component,
               epsilon: float = DEFAULT_WEIGHT_EPSILON,
               compatible: ResidueCompatibility = always_compatible) -> bool:
    """
    Check whether ``a`` is equivalent to ``b``.

    A weight mismatch counts as a false positive on ``a`` (once per check).

    Args:
        a: Component being reduced
        b: Candidate representative
        epsilon: Per-edge weight tolerance
        compatible: Residue-compatibility predicate

    Returns:
        True if the components are isomorphic
    """
    if a.phase != b.phase:
        return False

    if len(a.edges) != len(b.edges):
        return False

    violation = first_weight_violation(a, b, epsilon)
    if violation is not None:
        a.metrics.record_false_positive()
        logger.debug(
            f"Component {a.id!r} vs {b.id!r}: edge {violation} weight "
            f"{a.edges[violation].weight} differs from {b.edges[violation].weight}"
        )
        return False

    return bool(compatible(list(a.residues), list(b.residues)))


class CanonicalFormResolver:
    """
    Resolves a component to the representative of its equivalence class.

    Uses a first-match linear scan over the universe, so one resolution is
    O(|universe|) and reducing N components is O(N^2).
    """

    def __init__(self, epsilon: float = DEFAULT_WEIGHT_EPSILON,
                 compatible: Optional[ResidueCompatibility] = None):
        """
        Initialize resolver.

        Args:
            epsilon: Per-edge weight tolerance
            compatible: Residue-compatibility predicate (default: always compatible)
        """
        self.epsilon = epsilon
        self.compatible = compatible or always_compatible

    def resolve(self, component: Component,
                universe: Iterable[Component]) -> Component:
        """
        Find or become the canonical form of ``component``.

        Args:
            component: Component to reduce
            universe: Components to search, in iteration order

        Returns:
            The equivalence-class representative
        """
        if component.canonical:
            return component

        universe = list(universe)

        if isinstance(component.state, MemberOf):
            representative_id = component.state.representative_id
            for candidate in universe:
                if candidate.id == representative_id and candidate.canonical:
                    return candidate

        for candidate in universe:
            if candidate is component or not candidate.canonical:
                continue
            if isomorphic(component, candidate, self.epsilon, self.compatible):
                merge_residues(candidate, component)
                component.join(candidate)
                candidate.metrics.record_true_positive()
                logger.info(
                    f"Reduced component {component.id!r} to canonical {candidate.id!r}"
                )
                return candidate

        component.promote()
        logger.info(f"Component {component.id!r} promoted to canonical form")
        return component
