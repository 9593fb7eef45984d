"""
Linker facade: the embeddable boundary of the engine.

Wraps a Registry and the two resolvers behind a single re-entrant lock so
that every mutation (creation, destruction, canonicalization, resolution,
edge creation, residue merge) is serialized. Activation capabilities run while
the lock is held and may read from the linker, but any mutation they attempt
is rejected.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Union

from ..config import LinkerConfig
from ..core.component import Component
from ..core.errors import InvalidPreconditionError
from ..core.experience import LinkEvent, TemporalSource
from ..core.metrics import MetricsSnapshot
from ..core.registry import Registry
from ..core.types import (
    Activation,
    ComponentId,
    InvocationEdge,
    InvocationKind,
    Phase,
    SymbolicResidue,
)
from .canonical import CanonicalFormResolver, ResidueCompatibility
from .indirect import IndirectLinkResolver, discover
from .snapshot import ComponentView, LinkerSnapshot

logger = logging.getLogger(__name__)


class Linker:
    """
    Component linker with isomorphic reduction and indirect-link resolution.

    Example:
        >>> linker = Linker()
        >>> a = linker.create_component(1, "render")
        >>> b = linker.create_component(2)
        >>> _ = linker.add_residue(2, "render", activation=lambda ctx: 0.9)
        >>> linker.resolve_indirect(1, "render")
        2
    """

    def __init__(self, config: Optional[LinkerConfig] = None,
                 clock: Optional[TemporalSource] = None,
                 compatible: Optional[ResidueCompatibility] = None):
        """
        Initialize linker.

        Args:
            config: Engine parameters (defaults if None)
            clock: Temporal source for experiential log timestamps
            compatible: Residue-compatibility predicate for isomorphism

        Raises:
            ValueError: If the configuration fails validation
        """
        self.config = config or LinkerConfig()
        errors = self.config.errors()
        if errors:
            raise ValueError(f"Invalid linker configuration: {'; '.join(errors)}")
        self.registry = Registry(
            max_components=self.config.max_components,
            experience_capacity=self.config.experience_capacity,
            clock=clock,
        )
        self.canonical_resolver = CanonicalFormResolver(
            epsilon=self.config.weight_epsilon,
            compatible=compatible,
        )
        self.link_resolver = IndirectLinkResolver(
            threshold=self.config.activation_threshold,
        )
        self.lock = threading.RLock()
        self._resolution_depth = 0

    @contextmanager
    def _mutation(self, operation: str) -> Iterator[None]:
        with self.lock:
            if self._resolution_depth:
                logger.warning(f"Rejected {operation} during an indirect resolution")
                raise InvalidPreconditionError(
                    f"Cannot {operation} while an indirect resolution is in progress",
                    operation=operation,
                )
            yield

    # Lifecycle

    def create_component(self, component_id: Optional[ComponentId] = None,
                         anchor: Optional[str] = None) -> Component:
        """
        Create a component, optionally with an initial inert anchor.

        The returned component is live. Mutate it through the Linker methods
        only; read it through ``snapshot()`` when another thread may be active.

        Raises:
            AllocationError: If the registry is at capacity
            InvalidPreconditionError: If the id is live or retired
        """
        with self._mutation('create'):
            return self.registry.create(component_id, anchor)

    def destroy_component(self, component_id: ComponentId) -> None:
        """
        Destroy a component.

        Raises:
            NotFoundError: If the id is unknown
            InvalidPreconditionError: If another live component is a member of its class
        """
        with self._mutation('destroy'):
            try:
                self.registry.destroy(component_id)
            except InvalidPreconditionError as e:
                logger.warning(f"Destroy rejected: {e}")
                raise

    def get(self, component_id: ComponentId) -> Component:
        """
        Look up a live component.

        Changing the returned component directly bypasses the linker lock;
        use the mutation methods to change it and ``snapshot()`` for
        consistent reads.

        Raises:
            NotFoundError: If the id is unknown
        """
        with self.lock:
            return self.registry.get(component_id)

    # Building shapes

    def add_residue(self, component_id: ComponentId, anchor: str,
                    context: Any = None,
                    activation: Optional[Activation] = None) -> SymbolicResidue:
        """Declare an anchor on a component, optionally activatable."""
        with self._mutation('add residue'):
            return self.registry.get(component_id).residues.add(anchor, context, activation)

    def add_edge(self, caller_id: ComponentId, callee_id: ComponentId,
                 kind: Union[InvocationKind, str] = InvocationKind.DIRECT,
                 weight: float = 1.0) -> InvocationEdge:
        """
        Append an edge of any kind from caller to callee.

        Raises:
            NotFoundError: If either id is unknown
            ValueError: If weight is outside [0, 1]
        """
        with self._mutation('add edge'):
            caller = self.registry.get(caller_id)
            self.registry.get(callee_id)
            return caller.edges.append(callee_id, InvocationKind.parse(kind), weight)

    def set_phase(self, component_id: ComponentId,
                  phase: Union[Phase, str]) -> None:
        with self._mutation('set phase'):
            self.registry.get(component_id).phase = Phase.parse(phase)

    # Resolution

    def canonicalize(self, component_id: ComponentId) -> ComponentId:
        """
        Return the id of the component's equivalence-class representative.

        Reduces the component first if it has not been canonicalized.
        """
        with self._mutation('canonicalize'):
            component = self.registry.get(component_id)
            representative = self.canonical_resolver.resolve(component, self.registry.all())
            return representative.id

    def reduce_all(self) -> Dict[ComponentId, ComponentId]:
        """
        Canonicalize every live component in registry order.

        Returns:
            Mapping of component id to representative id
        """
        with self._mutation('reduce'):
            result = {}
            for component in self.registry.all():
                representative = self.canonical_resolver.resolve(component, self.registry.all())
                result[component.id] = representative.id
            logger.info(
                f"Reduced {len(result)} component(s) to "
                f"{len(set(result.values()))} equivalence class(es)"
            )
            return result

    def resolve_indirect(self, source_id: ComponentId,
                         target_anchor: str) -> Optional[ComponentId]:
        """
        Bind ``source_id`` to the first component with an activatable anchor.

        Returns:
            Id of the linked component, or None if no link was made
        """
        with self._mutation('resolve'):
            source = self.registry.get(source_id)
            self._resolution_depth += 1
            try:
                return self.link_resolver.resolve(source, target_anchor, self.registry.all())
            finally:
                self._resolution_depth -= 1

    def discover(self, anchor: str) -> List[ComponentId]:
        """Ids of every component exposing ``anchor``, activatable or not."""
        with self.lock:
            return [c.id for c in discover(anchor, self.registry.all())]

    # Diagnostics

    def metrics_of(self, component_id: ComponentId) -> MetricsSnapshot:
        with self.lock:
            return self.registry.get(component_id).metrics.snapshot()

    def experience_of(self, component_id: ComponentId) -> List[LinkEvent]:
        with self.lock:
            return self.registry.get(component_id).experience.events()

    def record_missed_link(self, component_id: ComponentId) -> MetricsSnapshot:
        """
        Report a link the engine should have made from ``component_id``.

        For external validators; the engine itself never records misses.
        """
        with self._mutation('record miss'):
            component = self.registry.get(component_id)
            component.metrics.record_false_negative()
            return component.metrics.snapshot()

    def equivalence_classes(self) -> Dict[ComponentId, List[ComponentId]]:
        return self.snapshot().equivalence_classes()

    def snapshot(self) -> LinkerSnapshot:
        """Consistent, immutable copy of the universe."""
        with self.lock:
            return LinkerSnapshot(
                components=tuple(ComponentView.of(c) for c in self.registry.all())
            )

    def __len__(self) -> int:
        return len(self.registry)

    def __contains__(self, component_id: object) -> bool:
        return component_id in self.registry
