"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from bddgen_tools.security import resolve_under_root

CONFIG_FILE_NAME = "bddgen_tools.toml"

DEFAULT_GENERATOR_CONFIG = "playwright.config.ts"
DEFAULT_TEMP_CONFIG = "playwright.config.bddgen-temp.ts"
DEFAULT_SCRATCH_DIR = "tests/features-gen-temp"
DEFAULT_OUTPUT_DIR = "tests/features-gen"
DEFAULT_STEPS_DIR = "tests/features/steps"
DEFAULT_GENERATOR_COMMAND = ("npx", "bddgen")
DEFAULT_UNUSED_STEPS_COMMAND = ("npx", "bddgen", "export", "--unused-steps")

_PATH_FIELDS = ("generator_config", "temp_config", "scratch_dir", "output_dir", "steps_dir")


@dataclass(slots=True, frozen=True)
class PathsConfig:
    """Project layout, as root-relative POSIX paths."""

    generator_config: str
    temp_config: str
    scratch_dir: str
    output_dir: str
    steps_dir: str


@dataclass(slots=True, frozen=True)
class CommandsConfig:
    """External command lines invoked by the tools."""

    generator: tuple[str, ...]
    unused_steps: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class AuditConfig:
    """Audit log toggle."""

    enabled: bool


@dataclass(slots=True, frozen=True)
class ToolsConfig:
    """Fully merged configuration shared by both tools."""

    repo_root: Path
    data_dir: Path
    paths: PathsConfig
    commands: CommandsConfig
    audit: AuditConfig

    @property
    def generator_config_path(self) -> Path:
        return resolve_under_root(self.repo_root, self.paths.generator_config)

    @property
    def temp_config_path(self) -> Path:
        return resolve_under_root(self.repo_root, self.paths.temp_config)

    @property
    def scratch_root(self) -> Path:
        return resolve_under_root(self.repo_root, self.paths.scratch_dir)

    @property
    def canonical_root(self) -> Path:
        return resolve_under_root(self.repo_root, self.paths.output_dir)

    @property
    def steps_root(self) -> Path:
        return resolve_under_root(self.repo_root, self.paths.steps_dir)

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / "audit.jsonl"


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    audit_enabled: bool | None = None


def default_config(repo_root: Path) -> ToolsConfig:
    """Build default config for a given project root."""
    resolved_root = repo_root.resolve()
    return ToolsConfig(
        repo_root=resolved_root,
        data_dir=resolved_root / ".bddgen_tools",
        paths=PathsConfig(
            generator_config=DEFAULT_GENERATOR_CONFIG,
            temp_config=DEFAULT_TEMP_CONFIG,
            scratch_dir=DEFAULT_SCRATCH_DIR,
            output_dir=DEFAULT_OUTPUT_DIR,
            steps_dir=DEFAULT_STEPS_DIR,
        ),
        commands=CommandsConfig(
            generator=DEFAULT_GENERATOR_COMMAND,
            unused_steps=DEFAULT_UNUSED_STEPS_COMMAND,
        ),
        audit=AuditConfig(enabled=True),
    )


def load_repo_config_file(repo_root: Path) -> dict[str, object]:
    """Load optional bddgen_tools.toml from the project root."""
    config_path = repo_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    if not output:
        raise ValueError(f"Config field '{section}.{field}' must not be empty.")
    return tuple(output)


def _optional_path_string(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value.strip().replace("\\", "/").rstrip("/")


def merge_config(
    base: ToolsConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> ToolsConfig:
    """Merge defaults, repo config, then CLI overrides."""
    paths_payload = _get_table(repo_payload, "paths")
    commands_payload = _get_table(repo_payload, "commands")
    audit_payload = _get_table(repo_payload, "audit")

    path_values = {
        name: _optional_path_string(
            paths_payload.get(name), f"paths.{name}", getattr(base.paths, name)
        )
        for name in _PATH_FIELDS
    }

    generator = base.commands.generator
    if "generator" in commands_payload:
        generator = _tuple_of_strings(commands_payload["generator"], "commands", "generator")
    unused_steps = base.commands.unused_steps
    if "unused_steps" in commands_payload:
        unused_steps = _tuple_of_strings(
            commands_payload["unused_steps"], "commands", "unused_steps"
        )

    audit_enabled = base.audit.enabled
    if "enabled" in audit_payload:
        raw_enabled = audit_payload["enabled"]
        if not isinstance(raw_enabled, bool):
            raise ValueError("Config field 'audit.enabled' must be a boolean.")
        audit_enabled = raw_enabled

    merged = ToolsConfig(
        repo_root=base.repo_root,
        data_dir=base.data_dir,
        paths=PathsConfig(**path_values),
        commands=CommandsConfig(generator=generator, unused_steps=unused_steps),
        audit=AuditConfig(enabled=audit_enabled),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: ToolsConfig, overrides: CliOverrides) -> ToolsConfig:
    """Apply startup overrides at highest precedence and validate the layout."""
    audit = AuditConfig(
        enabled=(
            overrides.audit_enabled
            if overrides.audit_enabled is not None
            else config.audit.enabled
        )
    )
    data_dir = overrides.data_dir or config.data_dir
    effective = ToolsConfig(
        repo_root=config.repo_root,
        data_dir=data_dir.resolve(),
        paths=config.paths,
        commands=config.commands,
        audit=audit,
    )
    _validate_layout(effective)
    return effective


def load_effective_config(repo_root: Path, overrides: CliOverrides | None = None) -> ToolsConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = repo_root.resolve()
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _validate_layout(config: ToolsConfig) -> None:
    # Raises PathBlockedError for any path outside repo_root.
    scratch = config.scratch_root
    canonical = config.canonical_root
    if scratch == canonical:
        raise ValueError("Config fields 'paths.scratch_dir' and 'paths.output_dir' must differ.")
    if canonical.is_relative_to(scratch) or scratch.is_relative_to(canonical):
        raise ValueError(
            "Config fields 'paths.scratch_dir' and 'paths.output_dir' must not be nested."
        )
    if config.temp_config_path == config.generator_config_path:
        raise ValueError(
            "Config fields 'paths.temp_config' and 'paths.generator_config' must differ."
        )
    _ = config.steps_root
