"""Configuration and directory layout for the toolkit installer."""

import os
from pathlib import Path

CLAUDE_DIR = Path(os.environ.get("CLAUDE_CONFIG_DIR") or Path.home() / ".claude")

# Destination layout, relative to the claude dir
SKILLS_DIRNAME = "skills"
COMMANDS_DIRNAME = "commands"
AGENTS_DIRNAME = "agents"
SETTINGS_FILENAME = "settings.json"
BASE_CONFIG_FILENAME = "CLAUDE.md"
UNINSTALL_SCRIPT_FILENAME = "uninstall-tool-kit.sh"

# Source layout, relative to a toolkit checkout
HOOKS_CONFIG_PATH = Path("hooks") / "hooks.json"
REQUIRED_SOURCE_DIRS = [SKILLS_DIRNAME, COMMANDS_DIRNAME]
REQUIRED_SOURCE_FILES = [BASE_CONFIG_FILENAME]

# Hook config keys
PROMPT_MARKER_KEY = "promptFile"
PROMPT_CONTENT_KEY = "prompt"
HOOKS_RESERVED_KEY = "hooks"

LOG_LEVEL_ENV = "PROMPTKIT_LOG_LEVEL"


def destination_dirs(claude_dir: Path) -> list[Path]:
    """Directories the installer owns under the claude dir."""
    return [
        claude_dir,
        claude_dir / SKILLS_DIRNAME,
        claude_dir / COMMANDS_DIRNAME,
        claude_dir / AGENTS_DIRNAME,
    ]