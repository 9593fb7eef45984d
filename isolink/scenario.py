"""
YAML scenario files.

A scenario declares components and an ordered list of operations to apply to
a Linker. Activations in scenario files are constant scores.

Example::

    components:
      - id: 1
        anchor: render
      - id: 2
        phase: dormant
        residues:
          - anchor: render
            score: 0.9
        edges:
          - callee: 1
            kind: direct
            weight: 0.4
    operations:
      - resolve: {source: 1, anchor: render}
      - canonicalize: 2
      - reduce_all: true
      - destroy: 1
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .core.errors import LinkerError
from .core.types import InvocationKind, Phase, constant_activation
from .engine.linker import Linker

logger = logging.getLogger(__name__)

OPERATIONS = ("canonicalize", "resolve", "reduce_all", "destroy", "phase")


class ScenarioError(ValueError):
    """Raised when a scenario file is malformed."""


@dataclass
class ResidueSpec:
    anchor: str
    score: Optional[float] = None
    context: Any = None


@dataclass
class EdgeSpec:
    callee: Any
    kind: InvocationKind = InvocationKind.DIRECT
    weight: float = 1.0


@dataclass
class ComponentSpec:
    id: Any = None
    anchor: Optional[str] = None
    phase: Phase = Phase.DORMANT
    residues: List[ResidueSpec] = field(default_factory=list)
    edges: List[EdgeSpec] = field(default_factory=list)


@dataclass
class Operation:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OperationResult:
    operation: Operation
    result: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            'operation': self.operation.name,
            'args': self.operation.args,
            'result': self.result,
        }


@dataclass
class Scenario:
    """A parsed scenario ready to run against a Linker."""
    components: List[ComponentSpec] = field(default_factory=list)
    operations: List[Operation] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Scenario':
        if not isinstance(data, dict):
            raise ScenarioError("Scenario must be a mapping")

        components = [_parse_component(entry) for entry in data.get('components') or []]
        operations = [_parse_operation(entry) for entry in data.get('operations') or []]
        return cls(components=components, operations=operations)

    def build(self, linker: Linker) -> None:
        """
        Create every declared component, then add edges.

        Edges are added after all components exist so they may point forward.
        """
        created = []
        for spec in self.components:
            component = linker.create_component(spec.id, spec.anchor)
            linker.set_phase(component.id, spec.phase)
            for residue in spec.residues:
                activation = None if residue.score is None else constant_activation(residue.score)
                linker.add_residue(component.id, residue.anchor, residue.context, activation)
            created.append((component.id, spec))

        for component_id, spec in created:
            for edge in spec.edges:
                linker.add_edge(component_id, edge.callee, edge.kind, edge.weight)

    def run(self, linker: Linker) -> List[OperationResult]:
        """
        Build the components and apply every operation in order.

        Returns:
            One result per operation

        Raises:
            ScenarioError: If a declared value is rejected by the linker
            LinkerError: If an operation violates a linker precondition
        """
        try:
            self.build(linker)
            results = []
            for operation in self.operations:
                result = _apply(linker, operation)
                logger.debug(f"{operation.name} {operation.args} -> {result!r}")
                results.append(OperationResult(operation, result))
        except (LinkerError, ScenarioError):
            raise
        except ValueError as e:
            raise ScenarioError(f"Scenario rejected by linker: {e}") from e
        return results


def load_scenario(path: Union[str, Path]) -> Scenario:
    """
    Load a scenario from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ScenarioError: If the content is malformed
    """
    path = Path(path)
    with open(path, 'r') as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ScenarioError(f"Invalid YAML in {path}: {e}") from e
    return Scenario.from_dict(data)


def _apply(linker: Linker, operation: Operation) -> Any:
    args = operation.args
    if operation.name == "canonicalize":
        return linker.canonicalize(args['id'])
    if operation.name == "resolve":
        return linker.resolve_indirect(args['source'], args['anchor'])
    if operation.name == "reduce_all":
        return linker.reduce_all()
    if operation.name == "destroy":
        linker.destroy_component(args['id'])
        return None
    if operation.name == "phase":
        linker.set_phase(args['id'], args['phase'])
        return None
    raise ScenarioError(f"Unknown operation {operation.name!r}")


def _parse_component(entry: Any) -> ComponentSpec:
    if not isinstance(entry, dict):
        raise ScenarioError(f"Component entry must be a mapping, got {entry!r}")
    try:
        anchor = entry.get('anchor')
        if anchor is not None:
            _check_anchor(anchor)
        residues = [_parse_residue(r) for r in entry.get('residues') or []]
        edges = [_parse_edge(e) for e in entry.get('edges') or []]
        return ComponentSpec(
            id=entry.get('id'),
            anchor=anchor,
            phase=Phase.parse(entry.get('phase', 'dormant')),
            residues=residues,
            edges=edges,
        )
    except KeyError as e:
        raise ScenarioError(f"Component entry missing key {e}: {entry!r}") from e
    except (TypeError, ValueError) as e:
        raise ScenarioError(f"Invalid component entry {entry!r}: {e}") from e


def _parse_residue(entry: Dict[str, Any]) -> ResidueSpec:
    score = entry.get('score')
    return ResidueSpec(
        anchor=_check_anchor(entry['anchor']),
        score=None if score is None else float(score),
        context=entry.get('context'),
    )


def _parse_edge(entry: Dict[str, Any]) -> EdgeSpec:
    weight = float(entry.get('weight', 1.0))
    if not 0.0 <= weight <= 1.0:
        raise ValueError(f"edge weight must be within [0, 1], got {weight}")
    return EdgeSpec(
        callee=entry['callee'],
        kind=InvocationKind.parse(entry.get('kind', 'direct')),
        weight=weight,
    )


def _check_anchor(anchor: Any) -> str:
    if not isinstance(anchor, str) or not anchor:
        raise ValueError(f"anchor must be a non-empty string, got {anchor!r}")
    return anchor


def _parse_operation(entry: Any) -> Operation:
    if not isinstance(entry, dict) or len(entry) != 1:
        raise ScenarioError(f"Operation must be a single-key mapping, got {entry!r}")

    name, value = next(iter(entry.items()))
    if name not in OPERATIONS:
        raise ScenarioError(f"Unknown operation {name!r}; expected one of {', '.join(OPERATIONS)}")

    if name in ("canonicalize", "destroy"):
        args = value if isinstance(value, dict) else {'id': value}
        required = ('id',)
    elif name == "resolve":
        args = value if isinstance(value, dict) else {}
        required = ('source', 'anchor')
    elif name == "phase":
        args = value if isinstance(value, dict) else {}
        required = ('id', 'phase')
    else:
        args = {}
        required = ()

    missing = [key for key in required if key not in args]
    if missing:
        raise ScenarioError(f"Operation {name!r} missing {', '.join(missing)}")
    if name == "phase":
        try:
            Phase.parse(args['phase'])
        except ValueError as e:
            raise ScenarioError(f"Invalid phase operation {entry!r}: {e}") from e
    return Operation(name=name, args=dict(args))
