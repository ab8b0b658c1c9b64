"""Inline external prompt files into the hook config and merge it into settings."""

import json
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any

from promptkit.config import (
    HOOKS_RESERVED_KEY,
    PROMPT_CONTENT_KEY,
    PROMPT_MARKER_KEY,
)

logger = logging.getLogger(__name__)


class HookStage(str, Enum):
    """Progress of the combined install-hooks flow."""

    NOT_STARTED = "not-started"
    CONFIG_LOADED = "config-loaded"
    REFERENCES_RESOLVED = "references-resolved"
    MERGED = "merged"
    WRITTEN = "written"


class HookMergeError(Exception):
    """Base error for the hook merge flow.

    ``stage`` is the last stage that completed before the failure.
    """

    stage: HookStage = HookStage.NOT_STARTED


class HookConfigError(HookMergeError):
    """The hook config is missing, unreadable, or not valid JSON."""


class MissingPromptFileError(HookMergeError):
    """A ``promptFile`` reference points at a file that cannot be read."""

    def __init__(self, configured: str, resolved: Path):
        super().__init__(f"Missing prompt file: {configured} (resolved to {resolved})")
        self.configured = configured
        self.resolved = resolved


class SettingsError(HookMergeError):
    """The existing settings file is not a valid JSON object."""


class SettingsWriteError(HookMergeError):
    """Writing the merged settings file failed."""


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class _PromptResolver:
    """Reads prompt files relative to a base dir, once per resolved path."""

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self.count = 0
        self._cache: dict[Path, str] = {}

    def read(self, configured: Any) -> str:
        if not isinstance(configured, str):
            raise HookConfigError(
                f"{PROMPT_MARKER_KEY} must be a string path, got {type(configured).__name__}"
            )
        resolved = (self.base_dir / configured).resolve()
        if resolved not in self._cache:
            try:
                self._cache[resolved] = resolved.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise MissingPromptFileError(configured, resolved) from e
            logger.debug("Loaded prompt file %s", resolved)
        self.count += 1
        return self._cache[resolved]

    def inline(self, node: Any) -> Any:
        """Return a copy of ``node`` with every prompt reference inlined."""
        if isinstance(node, list):
            return [self.inline(item) for item in node]
        if not isinstance(node, dict):
            return node

        result: dict[str, Any] = {}
        for key, value in node.items():
            if key == PROMPT_MARKER_KEY:
                result[PROMPT_CONTENT_KEY] = self.read(value)
            elif key == PROMPT_CONTENT_KEY and PROMPT_MARKER_KEY in node:
                # Replaced by the marker's content
                continue
            else:
                result[key] = self.inline(value)
        return result


def _inline_document(document: Any, base_dir: Path) -> tuple[Any, int]:
    resolver = _PromptResolver(base_dir)
    return resolver.inline(document), resolver.count


def _read_hook_config(config_path: Path) -> Any:
    try:
        return _load_json(config_path)
    except (OSError, UnicodeDecodeError) as e:
        raise HookConfigError(f"Cannot read hook config {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise HookConfigError(f"Invalid JSON in hook config {config_path}: {e}") from e


def inline_prompt_references(config_path: Path) -> Any:
    """Load a hook config and replace every ``promptFile`` with its text.

    Paths are resolved against the directory holding ``config_path``. Objects
    without the marker are copied through unchanged. Nothing is written.
    """
    document = _read_hook_config(config_path)
    inlined, _ = _inline_document(document, config_path.parent)
    return inlined


def load_settings(settings_path: Path) -> dict[str, Any]:
    """Load the settings object, or an empty one if the file is absent."""
    if not settings_path.exists():
        return {}
    try:
        text = settings_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SettingsError(f"Cannot read settings {settings_path}: {e}") from e
    if not text.strip():
        return {}
    try:
        settings = json.loads(text)
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid JSON in settings {settings_path}: {e}") from e
    if not isinstance(settings, dict):
        raise SettingsError(
            f"Settings {settings_path} must be a JSON object, got {type(settings).__name__}"
        )
    return settings


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON to ``path`` via a temp file in the same dir + os.replace()."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(_dump_json(data))
            f.flush()
            os.fsync(f.fileno())
        tmp.chmod(path.stat().st_mode & 0o777 if path.exists() else 0o644)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def merge_into_settings(
    inlined: Any,
    settings_path: Path,
    reserved_key: str = HOOKS_RESERVED_KEY,
) -> dict[str, Any]:
    """Replace ``reserved_key`` in the settings file with ``inlined``.

    Every other top-level key is kept as is. The file is rewritten atomically
    and left untouched on any failure. Returns the merged settings.
    """
    settings = load_settings(settings_path)
    settings[reserved_key] = inlined
    try:
        write_json_atomic(settings_path, settings)
    except OSError as e:
        raise SettingsWriteError(f"Cannot write settings {settings_path}: {e}") from e
    return settings


def install_hooks(
    config_path: Path,
    settings_path: Path,
    reserved_key: str = HOOKS_RESERVED_KEY,
) -> int:
    """Inline the hook config and merge it into settings.

    Returns the number of prompt references that were inlined.
    """
    stage = HookStage.NOT_STARTED
    try:
        document = _read_hook_config(config_path)
        stage = HookStage.CONFIG_LOADED

        inlined, count = _inline_document(document, config_path.parent)
        stage = HookStage.REFERENCES_RESOLVED
        logger.debug("Inlined %d prompt reference(s) from %s", count, config_path)

        merge_into_settings(inlined, settings_path, reserved_key)
        stage = HookStage.WRITTEN
    except HookMergeError as e:
        if isinstance(e, SettingsWriteError):
            stage = HookStage.MERGED
        e.stage = stage
        logger.debug("Hook install failed after stage %s: %s", stage.value, e)
        raise

    logger.debug("Wrote %s to %s", reserved_key, settings_path)
    return count
