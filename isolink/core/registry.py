"""
Registry of live components.

Owns the component universe as an insertion-ordered mapping from id to
Component. Iteration order is insertion order, which the first-match
resolvers depend on. No resolution logic lives here.
"""

import logging
from typing import Dict, Iterator, List, Optional, Set

from .component import Component
from .experience import TemporalSource
from .types import ComponentId, MemberOf
from .errors import AllocationError, InvalidPreconditionError, NotFoundError

logger = logging.getLogger(__name__)


class Registry:
    """Insertion-ordered universe of components addressed by stable ids."""

    def __init__(self, max_components: Optional[int] = None,
                 experience_capacity: int = 64,
                 clock: Optional[TemporalSource] = None):
        """
        Initialize registry.

        Args:
            max_components: Maximum number of live components (None = unbounded)
            experience_capacity: Ring buffer capacity for each component's log
            clock: Temporal source handed to every component's log
        """
        self.max_components = max_components
        self.experience_capacity = experience_capacity
        self.clock = clock
        self._components: Dict[ComponentId, Component] = {}
        self._retired: Set[ComponentId] = set()
        self._next_id: ComponentId = 0

    def create(self, component_id: Optional[ComponentId] = None,
               anchor: Optional[str] = None) -> Component:
        """
        Create and admit a component.

        Args:
            component_id: Identifier to use; the next unused integer if None
            anchor: Optional initial (inert) anchor

        Returns:
            The new component

        Raises:
            AllocationError: If ``max_components`` live components exist
            InvalidPreconditionError: If the id is live or was retired
        """
        if component_id is None:
            component_id = self._allocate_id()
        elif component_id in self._components or component_id in self._retired:
            state = 'live' if component_id in self._components else 'retired'
            raise InvalidPreconditionError(
                f"Component id {component_id!r} is {state} and cannot be reused",
                operation='create',
                component_id=component_id,
            )

        if self.max_components is not None and len(self._components) >= self.max_components:
            raise AllocationError(
                f"Registry is full ({self.max_components} components)",
                capacity=self.max_components,
                details={'component_id': component_id},
            )

        component = Component(
            component_id,
            anchor=anchor,
            experience_capacity=self.experience_capacity,
            clock=self.clock,
        )
        self._components[component_id] = component
        if isinstance(component_id, int) and component_id >= self._next_id:
            self._next_id = component_id + 1

        logger.debug(f"Created component {component_id!r} (anchor={anchor!r})")
        return component

    def destroy(self, component_id: ComponentId) -> None:
        """
        Destroy a component and release its edges and residues.

        Raises:
            NotFoundError: If the id is unknown
            InvalidPreconditionError: If a live component is a member of its class
        """
        component = self.get(component_id)
        referents = self.members_of(component_id)
        if referents:
            raise InvalidPreconditionError(
                f"Component {component_id!r} is the representative of "
                f"{len(referents)} live component(s)",
                operation='destroy',
                component_id=component_id,
                referenced_by=referents,
            )

        del self._components[component_id]
        self._retired.add(component_id)
        component.release()
        logger.debug(f"Destroyed component {component_id!r}")

    def get(self, component_id: ComponentId) -> Component:
        """
        Look up a live component.

        Raises:
            NotFoundError: If the id is unknown
        """
        try:
            return self._components[component_id]
        except KeyError:
            raise NotFoundError(component_id) from None

    def all(self) -> List[Component]:
        """Live components in insertion order."""
        return list(self._components.values())

    def ids(self) -> List[ComponentId]:
        return list(self._components)

    def members_of(self, representative_id: ComponentId) -> List[ComponentId]:
        """Ids of live components folded into ``representative_id``'s class."""
        return [
            c.id for c in self._components.values()
            if isinstance(c.state, MemberOf) and c.state.representative_id == representative_id
        ]

    def is_retired(self, component_id: ComponentId) -> bool:
        return component_id in self._retired

    def _allocate_id(self) -> ComponentId:
        while self._next_id in self._components or self._next_id in self._retired:
            self._next_id += 1
        component_id = self._next_id
        self._next_id += 1
        return component_id

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._components

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[Component]:
        return iter(self.all())
