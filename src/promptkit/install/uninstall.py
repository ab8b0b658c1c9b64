"""Generate the self-deleting uninstall script."""

import shlex
import stat
from pathlib import Path

UNINSTALL_TEMPLATE = """\
#!/bin/bash

# Uninstall script for Claude Code Tool Kit

set -euo pipefail

readonly COLOR_GREEN='\\033[0;32m'
readonly COLOR_RESET='\\033[0m'
# The script lives in the config dir it cleans up
readonly CLAUDE_DIR="$(cd "$(dirname "${{BASH_SOURCE[0]}}")" && pwd)"

echo "This will remove the Claude Code Tool Kit."
read -p "Are you sure? (y/N): " -n 1 -r
echo

[[ $REPLY =~ ^[Yy]$ ]] || {{
  echo "Uninstall cancelled."
  exit 0
}}

declare -a skillsToRemove=({skills})
declare -a commandsToRemove=({commands})
declare -a agentsToRemove=({agents})

removedCount=0

for skill in ${{skillsToRemove[@]+"${{skillsToRemove[@]}}"}}; do
  [[ -d "${{CLAUDE_DIR}}/skills/${{skill}}" ]] || continue
  rm -rf "${{CLAUDE_DIR}}/skills/${{skill}}"
  removedCount=$((removedCount + 1))
done

for cmd in ${{commandsToRemove[@]+"${{commandsToRemove[@]}}"}}; do
  [[ -f "${{CLAUDE_DIR}}/commands/${{cmd}}" ]] || continue
  rm -f "${{CLAUDE_DIR}}/commands/${{cmd}}"
  removedCount=$((removedCount + 1))
done

for agent in ${{agentsToRemove[@]+"${{agentsToRemove[@]}}"}}; do
  [[ -f "${{CLAUDE_DIR}}/agents/${{agent}}" ]] || continue
  rm -f "${{CLAUDE_DIR}}/agents/${{agent}}"
  removedCount=$((removedCount + 1))
done

echo -e "${{COLOR_GREEN}}Removed ${{removedCount}} items${{COLOR_RESET}}"
echo "Claude Code Tool Kit has been uninstalled."
echo "Note: CLAUDE.md and settings.json were NOT removed (they contain your personal config)."

rm -f "${{BASH_SOURCE[0]}}"
"""


def _bash_array(names: list[str]) -> str:
    return " ".join(shlex.quote(name) for name in sorted(names))


def render_uninstall_script(
    skills: list[str], commands: list[str], agents: list[str]
) -> str:
    """Render a bash script that removes the given skills, commands and agents."""
    return UNINSTALL_TEMPLATE.format(
        skills=_bash_array(skills),
        commands=_bash_array(commands),
        agents=_bash_array(agents),
    )


def write_uninstall_script(
    path: Path, skills: list[str], commands: list[str], agents: list[str]
) -> Path:
    """Write the uninstall script to ``path`` and mark it executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_uninstall_script(skills, commands, agents))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
