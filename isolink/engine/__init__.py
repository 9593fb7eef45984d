"""
Engine module: canonical-form and indirect-link resolution.

The Linker facade is the intended entry point; the resolvers are exposed for
callers that manage their own registry.
"""

from .canonical import (
    CanonicalFormResolver,
    DEFAULT_WEIGHT_EPSILON,
    always_compatible,
    isomorphic,
    merge_residues,
)
from .indirect import (
    IndirectLinkResolver,
    DEFAULT_ACTIVATION_THRESHOLD,
    add_indirect_edge,
    discover,
    witnessing,
)
from .linker import Linker
from .snapshot import ComponentView, LinkerSnapshot

__all__ = [
    "Linker",
    "CanonicalFormResolver",
    "IndirectLinkResolver",
    "ComponentView",
    "LinkerSnapshot",
    "DEFAULT_WEIGHT_EPSILON",
    "DEFAULT_ACTIVATION_THRESHOLD",
    "always_compatible",
    "isomorphic",
    "merge_residues",
    "add_indirect_edge",
    "discover",
    "witnessing",
]
