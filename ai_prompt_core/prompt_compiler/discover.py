"""Discovery of prompt definitions in a project tree.

Files matching the discovery glob are executed as modules and every
module-level ``Prompt`` instance they define is collected. A file that fails
to import is reported and skipped; the remaining files still load.
"""

import importlib.util
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path

from ai_prompt_core.logging import get_pipeline_logger

from .spec import Prompt

logger = get_pipeline_logger(__name__)

_SKIP_DIRS: frozenset[str] = frozenset({".git", ".venv", "venv", "__pycache__", ".mypy_cache", ".pytest_cache", "node_modules", ".tmp"})


@dataclass(frozen=True)
class DiscoveredPrompt:
    """A prompt found on disk, with the file that defines it."""

    prompt: Prompt
    file_path: Path

    @property
    def id(self) -> str:
        return self.prompt.id


def _iter_prompt_files(root: Path, pattern: str) -> list[Path]:
    """Files under root matching pattern, skipping common non-source directories."""
    return sorted(
        f for f in root.glob(pattern) if f.is_file() and f.suffix == ".py" and not any(part in _SKIP_DIRS for part in f.relative_to(root).parts)
    )


def _module_name_from_path(file: Path, root: Path) -> str:
    """Derive a dotted module name from a file path relative to root."""
    parts = list(file.relative_to(root).with_suffix("").parts)
    if parts[-1] == "__init__" and len(parts) > 1:
        parts = parts[:-1]
    return ".".join(parts)


def _ensure_importable(root: Path) -> None:
    """Ensure project root is on sys.path so prompt files can import their siblings."""
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


def _load_module_prompts(file: Path, root: Path) -> list[Prompt]:
    """Execute ``file`` as a fresh module and return its module-level prompts."""
    module_name = _module_name_from_path(file, root)
    spec = importlib.util.spec_from_file_location(module_name, file)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot load {file}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", SyntaxWarning)
            spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return [value for value in vars(module).values() if isinstance(value, Prompt)]


def discover_prompts(root: Path, pattern: str = "**/*_prompt.py") -> tuple[list[DiscoveredPrompt], list[str]]:
    """Load every prompt definition under ``root`` matching ``pattern``.

    Returns (prompts, import_errors). Prompts are ordered by file path, then by
    definition order within the file. When two prompts share an id, the first
    one found is kept.
    """
    root = root.resolve()
    _ensure_importable(root)

    discovered: list[DiscoveredPrompt] = []
    seen: dict[str, Path] = {}
    errors: list[str] = []

    for file in _iter_prompt_files(root, pattern):
        try:
            prompts = _load_module_prompts(file, root)
        except Exception as e:  # noqa: BLE001
            rel = file.relative_to(root)
            logger.warning(f"Skipping {rel}: failed to import ({type(e).__name__}: {e})")
            errors.append(f"{rel}: {type(e).__name__}: {e}")
            continue

        for prompt in prompts:
            if any(d.prompt is prompt for d in discovered):
                continue
            if prompt.id in seen:
                logger.warning(f"Duplicate prompt id '{prompt.id}' in {file.relative_to(root)}; keeping the one from {seen[prompt.id].relative_to(root)}")
                continue
            seen[prompt.id] = file
            discovered.append(DiscoveredPrompt(prompt=prompt, file_path=file))

    logger.debug(f"Discovered {len(discovered)} prompt(s) in {root} matching '{pattern}'")
    return discovered, errors


__all__ = ["DiscoveredPrompt", "discover_prompts"]
