"""ID generation for nodes and edges."""

import uuid

from triggergraph.kernel.reconciler import EDGE, NODE, IdFactory


def generate_id(prefix: str) -> str:
    """Generate a prefixed random id (12 hex chars of a UUID4), e.g. ``cond-3f2a9c01b7de``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def make_id_factory(node_prefix: str = "cond", edge_prefix: str = "edge") -> IdFactory:
    """Build the ``new_id(kind)`` callable the reconciler and hydration expect."""
    prefixes = {NODE: node_prefix, EDGE: edge_prefix}

    def new_id(kind: str) -> str:
        return generate_id(prefixes.get(kind, kind))

    return new_id
