"""Shared fixtures: a toolkit checkout and an empty claude dir."""

import json

import pytest


@pytest.fixture
def toolkit(tmp_path):
    """Create a minimal toolkit checkout."""
    source = tmp_path / "toolkit"
    for name in ("code-style", "git-workflow"):
        skill = source / "skills" / name
        skill.mkdir(parents=True)
        (skill / "SKILL.md").write_text(f"---\nname: {name}\n---\n# {name}\n")
    (source / "skills" / "git-workflow" / "examples").mkdir()
    (source / "skills" / "git-workflow" / "examples" / "commit.md").write_text("feat: x\n")

    (source / "commands").mkdir()
    (source / "commands" / "start.md").write_text("# /start\n")
    (source / "commands" / "planning.md").write_text("# /planning\n")
    (source / "commands" / "notes.txt").write_text("not a command\n")

    (source / "agents").mkdir()
    (source / "agents" / "reviewer.md").write_text("# reviewer\n")

    hooks = source / "hooks"
    (hooks / "prompts").mkdir(parents=True)
    (hooks / "prompts" / "stop.txt").write_text("Check the tests pass.\n")
    (hooks / "hooks.json").write_text(
        json.dumps(
            {
                "Stop": [
                    {
                        "matcher": "",
                        "hooks": [{"type": "prompt", "promptFile": "prompts/stop.txt"}],
                    }
                ]
            }
        )
    )

    (source / "CLAUDE.md").write_text("# Personal config\n")
    return source


@pytest.fixture
def claude_dir(tmp_path):
    return tmp_path / "home" / ".claude"
