"""
Immutable views of the component universe for read-only reporting.
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..core.component import Component
from ..core.experience import LinkEvent
from ..core.metrics import MetricsSnapshot
from ..core.types import ComponentId, InvocationEdge, Phase


@dataclass(frozen=True)
class ComponentView:
    """Point-in-time copy of one component."""
    id: ComponentId
    phase: Phase
    state: str
    canonical: bool
    canonical_ref: Optional[ComponentId]
    edges: Tuple[InvocationEdge, ...]
    anchors: Tuple[str, ...]
    metrics: MetricsSnapshot
    events: Tuple[LinkEvent, ...]

    @classmethod
    def of(cls, component: Component) -> 'ComponentView':
        return cls(
            id=component.id,
            phase=component.phase,
            state=component.state.label,
            canonical=component.canonical,
            canonical_ref=component.canonical_ref,
            edges=tuple(component.edges),
            anchors=tuple(component.residues.anchors()),
            metrics=component.metrics.snapshot(),
            events=tuple(component.experience.events()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'phase': self.phase.value,
            'state': self.state,
            'canonical': self.canonical,
            'canonical_ref': self.canonical_ref,
            'edges': [edge.to_dict() for edge in self.edges],
            'anchors': list(self.anchors),
            'metrics': self.metrics.to_dict(),
            'events': [event.to_dict() for event in self.events],
        }


@dataclass(frozen=True)
class LinkerSnapshot:
    """Consistent copy of every live component, in registry order."""
    components: Tuple[ComponentView, ...]

    def get(self, component_id: ComponentId) -> Optional[ComponentView]:
        for view in self.components:
            if view.id == component_id:
                return view
        return None

    def equivalence_classes(self) -> Dict[ComponentId, List[ComponentId]]:
        """
        Map each representative to the ids in its class (itself first).

        Components that have not been canonicalized are omitted.
        """
        classes: Dict[ComponentId, List[ComponentId]] = OrderedDict()
        for view in self.components:
            if view.canonical:
                classes[view.id] = [view.id]
        for view in self.components:
            if not view.canonical and view.canonical_ref is not None:
                classes.setdefault(view.canonical_ref, []).append(view.id)
        return dict(classes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'components': [view.to_dict() for view in self.components],
            'equivalence_classes': {
                str(rep): members for rep, members in self.equivalence_classes().items()
            },
        }
