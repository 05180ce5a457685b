"""
File utilities for the OAS client generator.

This module provides the file and directory operations the command line uses
to put a generated client on disk.
"""

import shutil
from pathlib import Path


def write_files_to_disk(files: dict[Path, str]) -> None:
    """Write generated files to disk.

    Args:
        files: Dictionary mapping file paths to their content.
    """
    for path, content in files.items():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def clean_output_directory(output_dir: Path) -> None:
    """Remove everything in ``output_dir`` and recreate it empty."""
    shutil.rmtree(output_dir, ignore_errors=True)
    output_dir.mkdir(parents=True, exist_ok=True)


def restore_output_directory(backup_dir: Path, output_dir: Path) -> None:
    """Replace the content of ``output_dir`` with a previously taken backup."""
    shutil.rmtree(output_dir, ignore_errors=True)
    shutil.copytree(backup_dir, output_dir)
