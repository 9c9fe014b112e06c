"""Incremental synchronization of generated BDD specs."""

from .engine import apply_generated_tree, classify_and_copy, list_files, synchronize
from .generator import (
    GeneratorConfigError,
    GeneratorError,
    create_temporary_config,
    generate_to_scratch,
    redirect_output_dir,
    run_generator,
)
from .models import FileDecision, SyncAction, SyncSummary, summarize

__all__ = [
    "FileDecision",
    "GeneratorConfigError",
    "GeneratorError",
    "SyncAction",
    "SyncSummary",
    "apply_generated_tree",
    "classify_and_copy",
    "create_temporary_config",
    "generate_to_scratch",
    "list_files",
    "redirect_output_dir",
    "run_generator",
    "summarize",
    "synchronize",
]
