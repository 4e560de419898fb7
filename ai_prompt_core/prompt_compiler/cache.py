"""Cache store for compiled prompt text.

Layout of the artifact (UTF-8 JSON):
    {
      "<prompt id>": {"variants": {"<variant>": "<compiled text>", ...}, "hash": "<content hash>"},
      ...
    }

Loading never fails: a missing, empty or unparsable artifact is an empty
cache. Writes are read-modify-write cycles on the artifact, serialized per
path and committed atomically with a temp file + ``os.replace``.
"""

import json
import os
import tempfile
import threading
from collections.abc import Iterator, Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from ai_prompt_core.logging import get_pipeline_logger

logger = get_pipeline_logger(__name__)


class GeneratedPrompt(BaseModel):
    """Compiled text per variant plus the hash of the state it was compiled from."""

    model_config = ConfigDict(frozen=True)

    variants: dict[str, str]
    hash: str


_ARTIFACT = TypeAdapter(dict[str, GeneratedPrompt])

_locks: dict[Path, threading.Lock] = {}
_locks_guard = threading.Lock()


def _artifact_lock(path: Path) -> threading.Lock:
    """One lock per resolved artifact path, shared by every PromptCache in the process."""
    key = path.resolve()
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.Lock()
        return lock


def read_artifact(path: Path) -> dict[str, GeneratedPrompt]:
    """Parse the artifact at ``path``; any failure yields an empty mapping."""
    if not path.exists():
        return {}
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read prompt cache {path}: {e}; treating it as empty")
        return {}
    if not raw.strip():
        return {}
    try:
        return _ARTIFACT.validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Prompt cache {path} is not valid ({e.error_count()} errors); treating it as empty")
        return {}


def write_artifact(path: Path, entries: Mapping[str, GeneratedPrompt]) -> None:
    """Atomically replace the artifact at ``path`` with ``entries``."""
    payload = {prompt_id: entry.model_dump(mode="json") for prompt_id, entry in entries.items()}
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class PromptCache:
    """Compiled prompts keyed by prompt id.

    Constructed once and passed to the renderer, evaluator and improver.
    Without a ``path`` the cache lives in memory only (useful in tests and
    for applications that ship compiled text in another form).

    Example:
        >>> cache = PromptCache.load(Path("prompts.gen.json"))
        >>> summarizer.render(cache, variant="short", json=True)
    """

    def __init__(self, entries: Mapping[str, GeneratedPrompt] | None = None, *, path: Path | None = None) -> None:
        self.path = path
        self._entries: dict[str, GeneratedPrompt] = dict(entries or {})

    @classmethod
    def load(cls, path: Path | str) -> "PromptCache":
        """Load the artifact at ``path`` (empty when missing or unreadable)."""
        path = Path(path)
        entries = read_artifact(path)
        logger.debug(f"Loaded {len(entries)} compiled prompts from {path}")
        return cls(entries, path=path)

    def reload(self) -> None:
        """Re-read the artifact, discarding in-memory state."""
        if self.path is not None:
            self._entries = read_artifact(self.path)

    def get(self, prompt_id: str) -> GeneratedPrompt | None:
        return self._entries.get(prompt_id)

    def variant_text(self, prompt_id: str, variant: str) -> str | None:
        """Stored text of one variant, or None."""
        entry = self._entries.get(prompt_id)
        if entry is None:
            return None
        return entry.variants.get(variant)

    def ids(self) -> list[str]:
        return list(self._entries)

    def items(self) -> Iterator[tuple[str, GeneratedPrompt]]:
        return iter(self._entries.items())

    def __contains__(self, prompt_id: object) -> bool:
        return prompt_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def store(self, prompt_id: str, entry: GeneratedPrompt) -> None:
        """Set (overwrite) the entry for ``prompt_id`` and persist it.

        Other prompts' entries on disk are re-read first so concurrent
        writers to the same artifact do not lose each other's updates.
        """
        if self.path is None:
            self._entries[prompt_id] = entry
            return
        with _artifact_lock(self.path):
            on_disk = read_artifact(self.path)
            on_disk[prompt_id] = entry
            write_artifact(self.path, on_disk)
            self._entries = {**self._entries, **on_disk}

    def replace_variant_text(self, prompt_id: str, variant: str, text: str) -> bool:
        """Replace one variant's compiled text, keeping the stored hash.

        Returns False (and leaves the artifact unchanged) when the prompt or
        variant has no entry.
        """
        if self.path is None:
            return self._replace_in(self._entries, prompt_id, variant, text)
        with _artifact_lock(self.path):
            on_disk = read_artifact(self.path)
            if not self._replace_in(on_disk, prompt_id, variant, text):
                return False
            write_artifact(self.path, on_disk)
            self._entries = {**self._entries, **on_disk}
            return True

    @staticmethod
    def _replace_in(entries: dict[str, GeneratedPrompt], prompt_id: str, variant: str, text: str) -> bool:
        entry = entries.get(prompt_id)
        if entry is None or variant not in entry.variants:
            return False
        entries[prompt_id] = entry.model_copy(update={"variants": {**entry.variants, variant: text}})
        return True

    def save(self) -> None:
        """Write the whole in-memory cache to the artifact."""
        if self.path is None:
            return
        with _artifact_lock(self.path):
            write_artifact(self.path, self._entries)


__all__ = ["GeneratedPrompt", "PromptCache", "read_artifact", "write_artifact"]
