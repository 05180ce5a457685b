"""
Utilities Module for Client Generation

This module provides utility functions for file operations and the string case
conversions used to build identifiers of the generated client.
"""

from .file_utils import clean_output_directory, restore_output_directory, write_files_to_disk
from .string_case import (
    class_name,
    escape_kotlin_keyword,
    escape_python_keyword,
    is_python_identifier,
    normalize_identifier,
    parameter_name,
    python_identifier,
    snakecase,
)

__all__ = [
    "class_name",
    "clean_output_directory",
    "escape_kotlin_keyword",
    "escape_python_keyword",
    "is_python_identifier",
    "normalize_identifier",
    "parameter_name",
    "python_identifier",
    "restore_output_directory",
    "snakecase",
    "write_files_to_disk",
]
