"""External spec generator invocation against a scratch output directory."""

from __future__ import annotations

import re
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from bddgen_tools.config import ToolsConfig

_OUTPUT_DIR_TEMPLATE = r"outputDir:\s*([\"']){value}\1"


class GeneratorConfigError(Exception):
    """Raised when the generator config cannot be redirected to the scratch tree."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


class GeneratorError(Exception):
    """Raised when the external generator fails or cannot be started."""

    def __init__(
        self,
        reason: str,
        hint: str,
        returncode: int | None = None,
        output: str = "",
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint
        self.returncode = returncode
        self.output = output


def redirect_output_dir(config_text: str, output_dir: str, scratch_dir: str) -> str:
    """Rewrite the first ``outputDir`` field naming ``output_dir`` to ``scratch_dir``."""
    pattern = re.compile(_OUTPUT_DIR_TEMPLATE.format(value=re.escape(output_dir)))
    rewritten, replacements = pattern.subn(
        lambda _match: f'outputDir: "{scratch_dir}"', config_text, count=1
    )
    if replacements == 0:
        raise GeneratorConfigError(
            reason=f"No outputDir field pointing at '{output_dir}' was found.",
            hint="Declare outputDir with a quoted literal matching paths.output_dir.",
        )
    return rewritten


def create_temporary_config(
    config_path: Path,
    temp_config_path: Path,
    output_dir: str,
    scratch_dir: str,
) -> Path:
    """Write a copy of the generator config whose output goes to the scratch tree."""
    if not config_path.exists():
        raise GeneratorConfigError(
            reason=f"Generator config not found: {config_path}",
            hint="Run from the project root or set paths.generator_config.",
        )
    config_text = config_path.read_text(encoding="utf-8")
    temp_config_path.write_text(
        redirect_output_dir(config_text, output_dir, scratch_dir), encoding="utf-8"
    )
    return temp_config_path


def run_generator(
    command: Sequence[str],
    temp_config: str,
    extra_args: Sequence[str],
    *,
    verbose: bool,
    cwd: Path,
) -> None:
    """Run the generator, streaming output when verbose and capturing it otherwise."""
    args = [*command, "-c", temp_config, *extra_args]
    try:
        if verbose:
            completed = subprocess.run(args, cwd=cwd, check=False)
            output = ""
        else:
            completed = subprocess.run(
                args,
                cwd=cwd,
                check=False,
                capture_output=True,
                text=True,
            )
            output = (completed.stderr or completed.stdout or "").strip()
    except OSError as exc:
        raise GeneratorError(
            reason=f"Could not start generator '{command[0]}': {exc}",
            hint="Install the generator or set commands.generator.",
        ) from exc
    if completed.returncode != 0:
        reason = f"Generator exited with status {completed.returncode}."
        if output:
            reason = f"{reason} {output.splitlines()[-1]}"
        raise GeneratorError(
            reason=reason,
            hint="Re-run with --verbose to see the full generator output.",
            returncode=completed.returncode,
            output=output,
        )


def remove_tree(path: Path) -> None:
    """Remove a directory tree if present."""
    if path.exists():
        shutil.rmtree(path)


def generate_to_scratch(
    config: ToolsConfig,
    extra_args: Sequence[str],
    *,
    verbose: bool,
) -> Path:
    """Regenerate every spec into a fresh scratch tree and return its root."""
    scratch_root = config.scratch_root
    remove_tree(scratch_root)
    scratch_root.mkdir(parents=True, exist_ok=True)

    temp_config_path = create_temporary_config(
        config.generator_config_path,
        config.temp_config_path,
        output_dir=config.paths.output_dir,
        scratch_dir=config.paths.scratch_dir,
    )
    try:
        run_generator(
            config.commands.generator,
            config.paths.temp_config,
            extra_args,
            verbose=verbose,
            cwd=config.repo_root,
        )
    finally:
        temp_config_path.unlink(missing_ok=True)
    return scratch_root
