"""Sequence the toolkit installation and fold each step into a report."""

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from promptkit import config
from promptkit.files.materializer import (
    ConfirmFn,
    ConflictPolicy,
    CopyResult,
    copy_file,
    copy_tree,
    ensure_directory,
)
from promptkit.hooks.merger import HookMergeError, SettingsError, install_hooks, load_settings
from promptkit.install.uninstall import write_uninstall_script

logger = logging.getLogger(__name__)


class Level(str, Enum):
    INFO = "info"
    OK = "ok"
    WARN = "warn"
    ERROR = "error"


class StepStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    SKIPPED = "skipped"
    FAILED = "failed"


class Message(BaseModel):
    level: Level
    text: str


class StepOutcome(BaseModel):
    """Result of one installation step."""

    name: str
    status: StepStatus = StepStatus.OK
    messages: list[Message] = Field(default_factory=list)
    installed: list[str] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status == StepStatus.FAILED


class InstallReport(BaseModel):
    """All step outcomes of one run."""

    steps: list[StepOutcome] = Field(default_factory=list)
    aborted: bool = False

    @property
    def success(self) -> bool:
        return not self.aborted and not any(step.failed for step in self.steps)

    @property
    def has_warnings(self) -> bool:
        return any(
            message.level == Level.WARN
            for step in self.steps
            for message in step.messages
        )

    @property
    def completed(self) -> list[str]:
        return [
            step.name
            for step in self.steps
            if step.status in (StepStatus.OK, StepStatus.WARNING)
        ]

    @property
    def incomplete(self) -> list[str]:
        return [
            step.name
            for step in self.steps
            if step.status in (StepStatus.SKIPPED, StepStatus.FAILED)
        ]

    def step(self, name: str) -> StepOutcome | None:
        for step in self.steps:
            if step.name == name:
                return step
        return None


NotifyFn = Callable[[Level, str], None]

_LOG_LEVELS = {
    Level.INFO: logging.INFO,
    Level.OK: logging.INFO,
    Level.WARN: logging.WARNING,
    Level.ERROR: logging.ERROR,
}


def _log_notify(level: Level, text: str) -> None:
    logger.log(_LOG_LEVELS[level], text)


class Installer:
    """Install a toolkit checkout into a claude config dir."""

    def __init__(
        self,
        source_dir: Path,
        claude_dir: Path | None = None,
        on_conflict: ConflictPolicy | None = None,
        confirm: ConfirmFn | None = None,
        notify: NotifyFn | None = None,
    ):
        self.source_dir = source_dir
        self.claude_dir = claude_dir or config.CLAUDE_DIR
        if on_conflict is None:
            on_conflict = ConflictPolicy.PROMPT if confirm else ConflictPolicy.SKIP
        elif on_conflict == ConflictPolicy.PROMPT and confirm is None:
            raise ValueError("ConflictPolicy.PROMPT requires a confirm callable")
        self.on_conflict = on_conflict
        self.confirm = confirm
        self.notify = notify or _log_notify

    # ── Paths ────────────────────────────────────────────────────

    @property
    def skills_dir(self) -> Path:
        return self.claude_dir / config.SKILLS_DIRNAME

    @property
    def commands_dir(self) -> Path:
        return self.claude_dir / config.COMMANDS_DIRNAME

    @property
    def agents_dir(self) -> Path:
        return self.claude_dir / config.AGENTS_DIRNAME

    @property
    def settings_path(self) -> Path:
        return self.claude_dir / config.SETTINGS_FILENAME

    @property
    def base_config_path(self) -> Path:
        return self.claude_dir / config.BASE_CONFIG_FILENAME

    @property
    def uninstall_script_path(self) -> Path:
        return self.claude_dir / config.UNINSTALL_SCRIPT_FILENAME

    def source_skills(self) -> list[Path]:
        root = self.source_dir / config.SKILLS_DIRNAME
        if not root.is_dir():
            return []
        return sorted(
            p for p in root.iterdir() if p.is_dir() and not p.name.startswith(".")
        )

    def _source_markdown(self, dirname: str) -> list[Path]:
        root = self.source_dir / dirname
        if not root.is_dir():
            return []
        return sorted(
            p for p in root.glob("*.md") if p.is_file() and not p.name.startswith(".")
        )

    def source_commands(self) -> list[Path]:
        return self._source_markdown(config.COMMANDS_DIRNAME)

    def source_agents(self) -> list[Path]:
        return self._source_markdown(config.AGENTS_DIRNAME)

    # ── Helpers ──────────────────────────────────────────────────

    def _emit(self, outcome: StepOutcome, level: Level, text: str) -> None:
        outcome.messages.append(Message(level=level, text=text))
        if level == Level.ERROR:
            outcome.status = StepStatus.FAILED
        elif level == Level.WARN and outcome.status == StepStatus.OK:
            outcome.status = StepStatus.WARNING
        self.notify(level, text)

    def _copy_items(
        self,
        outcome: StepOutcome,
        items: list[Path],
        copy: Callable[[Path], CopyResult],
        label: Callable[[Path], str],
    ) -> None:
        for item in items:
            try:
                result = copy(item)
            except OSError as e:
                self._emit(outcome, Level.ERROR, f"Failed to copy {label(item)}: {e}")
                continue
            if result == CopyResult.SKIPPED:
                self._emit(outcome, Level.INFO, f"Skipping {label(item)}")
            else:
                self._emit(outcome, Level.OK, f"Copied {label(item)}")
                outcome.installed.append(item.name)

    # ── Steps ────────────────────────────────────────────────────

    def validate_sources(self) -> StepOutcome:
        outcome = StepOutcome(name="validate sources")
        for dirname in config.REQUIRED_SOURCE_DIRS:
            if not (self.source_dir / dirname).is_dir():
                self._emit(outcome, Level.ERROR, f"Required directory not found: {dirname}")
        for filename in config.REQUIRED_SOURCE_FILES:
            if not (self.source_dir / filename).is_file():
                self._emit(outcome, Level.ERROR, f"{filename} not found")
        if not outcome.failed:
            self._emit(outcome, Level.OK, "All source files found")
        return outcome

    def create_directories(self) -> StepOutcome:
        outcome = StepOutcome(name="create directories")
        for path in config.destination_dirs(self.claude_dir):
            try:
                created = ensure_directory(path)
            except OSError as e:
                self._emit(outcome, Level.ERROR, f"Failed to create directory: {path} ({e})")
                return outcome
            if created:
                self._emit(outcome, Level.OK, f"Created directory: {path}")
            else:
                self._emit(outcome, Level.INFO, f"Directory already exists: {path}")
        return outcome

    def install_skills(self) -> StepOutcome:
        outcome = StepOutcome(name="skills")
        self._emit(outcome, Level.INFO, "Installing skills...")
        self._copy_items(
            outcome,
            self.source_skills(),
            lambda src: copy_tree(src, self.skills_dir, self.on_conflict, self.confirm),
            lambda src: f"{src.name}/",
        )
        self._emit(outcome, Level.INFO, f"Installed {len(outcome.installed)} skills")
        return outcome

    def install_commands(self) -> StepOutcome:
        outcome = StepOutcome(name="commands")
        self._emit(outcome, Level.INFO, "Installing commands...")
        self._copy_items(
            outcome,
            self.source_commands(),
            lambda src: copy_file(
                src, self.commands_dir / src.name, self.on_conflict, self.confirm
            ),
            lambda src: src.name,
        )
        self._emit(outcome, Level.INFO, f"Installed {len(outcome.installed)} commands")
        return outcome

    def install_agents(self) -> StepOutcome:
        outcome = StepOutcome(name="agents")
        if not (self.source_dir / config.AGENTS_DIRNAME).is_dir():
            self._emit(outcome, Level.INFO, "No agents directory in source; skipping agents")
            outcome.status = StepStatus.SKIPPED
            return outcome
        self._emit(outcome, Level.INFO, "Installing agents...")
        self._copy_items(
            outcome,
            self.source_agents(),
            lambda src: copy_file(
                src, self.agents_dir / src.name, self.on_conflict, self.confirm
            ),
            lambda src: src.name,
        )
        self._emit(outcome, Level.INFO, f"Installed {len(outcome.installed)} agents")
        return outcome

    def install_hooks(self) -> StepOutcome:
        outcome = StepOutcome(name="hooks")
        hook_config = self.source_dir / config.HOOKS_CONFIG_PATH
        if not hook_config.is_file():
            self._emit(
                outcome,
                Level.WARN,
                f"Hook config not found: {config.HOOKS_CONFIG_PATH}; skipping hooks",
            )
            outcome.status = StepStatus.SKIPPED
            return outcome

        self._emit(outcome, Level.INFO, "Installing hooks...")
        try:
            count = install_hooks(hook_config, self.settings_path, config.HOOKS_RESERVED_KEY)
        except HookMergeError as e:
            self._emit(outcome, Level.ERROR, f"Hook installation failed ({e.stage.value}): {e}")
            return outcome

        outcome.installed.append(config.HOOKS_RESERVED_KEY)
        self._emit(
            outcome,
            Level.OK,
            f"Merged hooks with {count} inlined prompt(s) into {self.settings_path}",
        )
        return outcome

    def install_base_config(self) -> StepOutcome:
        outcome = StepOutcome(name=config.BASE_CONFIG_FILENAME)
        self._emit(outcome, Level.INFO, f"Installing {config.BASE_CONFIG_FILENAME}...")
        self._copy_items(
            outcome,
            [self.source_dir / config.BASE_CONFIG_FILENAME],
            lambda src: copy_file(src, self.base_config_path, self.on_conflict, self.confirm),
            lambda src: src.name,
        )
        return outcome

    def _verify_count(
        self, outcome: StepOutcome, kind: str, expected: list[Path], dest_root: Path
    ) -> None:
        found = sum(1 for src in expected if (dest_root / src.name).exists())
        if found < len(expected):
            self._emit(
                outcome,
                Level.WARN,
                f"Some {kind} may not have been installed (found {found} of {len(expected)})",
            )
        else:
            self._emit(outcome, Level.OK, f"{found} {kind} installed")

    def verify_installation(self, report: InstallReport) -> StepOutcome:
        outcome = StepOutcome(name="verify installation")
        self._emit(outcome, Level.INFO, "Verifying installation...")
        self._verify_count(outcome, "skills", self.source_skills(), self.skills_dir)
        self._verify_count(outcome, "commands", self.source_commands(), self.commands_dir)
        agents = self.source_agents()
        if agents:
            self._verify_count(outcome, "agents", agents, self.agents_dir)

        if self.base_config_path.is_file():
            self._emit(outcome, Level.OK, f"{config.BASE_CONFIG_FILENAME} installed")
        else:
            self._emit(
                outcome, Level.ERROR, f"{config.BASE_CONFIG_FILENAME} installation failed"
            )

        hooks = report.step("hooks")
        if hooks is not None and hooks.status == StepStatus.OK:
            try:
                settings = load_settings(self.settings_path)
            except SettingsError as e:
                self._emit(outcome, Level.ERROR, str(e))
            else:
                if config.HOOKS_RESERVED_KEY in settings:
                    self._emit(outcome, Level.OK, f"Hooks present in {self.settings_path.name}")
                else:
                    self._emit(
                        outcome,
                        Level.ERROR,
                        f"Hooks missing from {self.settings_path.name}",
                    )
        return outcome

    def write_uninstall_script(self) -> StepOutcome:
        outcome = StepOutcome(name="uninstall script")
        try:
            path = write_uninstall_script(
                self.uninstall_script_path,
                skills=[p.name for p in self.source_skills()],
                commands=[p.name for p in self.source_commands()],
                agents=[p.name for p in self.source_agents()],
            )
        except OSError as e:
            self._emit(outcome, Level.WARN, f"Failed to create uninstall script: {e}")
            return outcome
        self._emit(outcome, Level.OK, f"Created uninstall script: {path}")
        return outcome

    def run(self) -> InstallReport:
        """Run every step; only source validation and directory creation abort."""
        report = InstallReport()
        for prerequisite in (self.validate_sources, self.create_directories):
            outcome = prerequisite()
            report.steps.append(outcome)
            if outcome.failed:
                logger.debug("Aborting install after %s", outcome.name)
                report.aborted = True
                return report

        for step in (
            self.install_skills,
            self.install_commands,
            self.install_agents,
            self.install_hooks,
            self.install_base_config,
        ):
            report.steps.append(step())

        report.steps.append(self.verify_installation(report))
        report.steps.append(self.write_uninstall_script())
        return report
