"""
Indirect-link resolution.

Binds a source component to the first registry component exposing an
activatable residue for a named anchor whose activation score exceeds the
threshold. The source is held in the Witness phase while the scan runs and is
restored afterwards, whatever the outcome.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from ..core.component import Component
from ..core.errors import ActivationError
from ..core.types import ComponentId, InvocationEdge, InvocationKind, Phase

logger = logging.getLogger(__name__)

DEFAULT_ACTIVATION_THRESHOLD = 0.5


@contextmanager
def witnessing(component: Component) -> Iterator[Phase]:
    """
    Hold ``component`` in the Witness phase for the duration of the block.

    Yields:
        The phase to restore on exit
    """
    original_phase = component.phase
    component.phase = Phase.WITNESS
    try:
        yield original_phase
    finally:
        component.phase = original_phase


def add_indirect_edge(source: Component, target: Component,
                      score: float) -> InvocationEdge:
    """
    Append an Indirect edge source -> target weighted by ``score``.

    Also records the link in the source's experiential log.

    Returns:
        The new edge
    """
    edge = source.edges.append(target.id, InvocationKind.INDIRECT, score)
    source.experience.record(source.id, target.id, score)
    return edge


def discover(anchor: str, components: Iterable[Component]) -> List[Component]:
    """Components exposing ``anchor``, activatable or inert, in iteration order."""
    return [
        component for component in components
        if anchor in component.residues.anchors()
    ]


class IndirectLinkResolver:
    """Resolves symbolic targets to concrete components via activation scores."""

    def __init__(self, threshold: float = DEFAULT_ACTIVATION_THRESHOLD):
        """
        Initialize resolver.

        Args:
            threshold: Scores must be strictly greater than this to link
        """
        self.threshold = threshold

    def resolve(self, source: Component, target_anchor: str,
                registry: Iterable[Component]) -> Optional[ComponentId]:
        """
        Resolve ``target_anchor`` for ``source``.

        Args:
            source: Component requesting the link
            target_anchor: Anchor text to search for
            registry: Candidate components in registry order

        Returns:
            Id of the linked component, or None if no residue qualified

        Raises:
            ActivationError: If an activation returns a score outside [0, 1]
        """
        with witnessing(source):
            for candidate in registry:
                for residue in candidate.residues.matching(target_anchor):
                    if residue.is_inert:
                        continue

                    score = residue.activate()
                    if not 0.0 <= score <= 1.0:
                        raise ActivationError(
                            f"Activation for anchor {target_anchor!r} on component "
                            f"{candidate.id!r} returned {score}, outside [0, 1]",
                            anchor=target_anchor,
                            score=score,
                            details={'component_id': candidate.id},
                        )

                    if score > self.threshold:
                        add_indirect_edge(source, candidate, score)
                        source.metrics.record_true_positive()
                        logger.info(
                            f"Linked {source.id!r} -> {candidate.id!r} via "
                            f"{target_anchor!r} (score={score:.3f})"
                        )
                        return candidate.id

                    logger.debug(
                        f"Rejected {target_anchor!r} on {candidate.id!r}: "
                        f"score {score:.3f} <= {self.threshold}"
                    )

        source.metrics.record_true_negative()
        logger.debug(f"No qualifying link for {target_anchor!r} from {source.id!r}")
        return None
