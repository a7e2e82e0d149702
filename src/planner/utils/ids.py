"""Identifier generation."""

import uuid
from typing import Optional


def new_id(prefix: Optional[str] = None) -> str:
    """Return a fresh opaque identifier.

    Args:
        prefix: Optional prefix joined to the random part with an underscore
            (e.g. "node" -> "node_3f2a...")

    Returns:
        Identifier string unique for the lifetime of the process
    """
    token = uuid.uuid4().hex
    if prefix:
        return f"{prefix}_{token}"
    return token
