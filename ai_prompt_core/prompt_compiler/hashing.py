"""Content hashing for prompt states.

The hash covers the serializable content of a PromptState (steps and
variants, in order). Tests hold predicates and are excluded, as is the step
registry that produced the state. Canonical JSON with sorted keys and compact
separators keeps the fingerprint independent of field declaration order.
"""

import hashlib
import json

from .types import PromptState

HASH_LENGTH = 16


def canonical_json(state: PromptState) -> str:
    """Canonical JSON of the hashed content of ``state``."""
    return json.dumps(state.model_dump(mode="json"), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def hash_state(state: PromptState) -> str:
    """Compute the short content hash of a prompt state.

    SHA256 hex of the canonical JSON, truncated to ``HASH_LENGTH`` characters.
    """
    return hashlib.sha256(canonical_json(state).encode("utf-8")).hexdigest()[:HASH_LENGTH]


__all__ = ["HASH_LENGTH", "canonical_json", "hash_state"]
