#!/usr/bin/env python3
"""Command-line interface for the OAS client generator."""

import argparse
import contextlib
import json
import logging
import shutil
import sys
import tempfile
import traceback
from collections.abc import Iterator
from pathlib import Path
from typing import Final

from oas_client_generator.config import GenerationConfig, namespace_from_title
from oas_client_generator.errors import GeneratorError
from oas_client_generator.generator.dialects import DIALECTS
from oas_client_generator.generator.emitter import ClientCodeGenerator
from oas_client_generator.parser.models import ParsedSpec
from oas_client_generator.parser.oas_parser import OASParser
from oas_client_generator.utils.file_utils import clean_output_directory, restore_output_directory, write_files_to_disk

EXIT_SUCCESS: Final = 0
EXIT_FILE_NOT_FOUND: Final = 1
EXIT_INVALID_JSON: Final = 2
EXIT_GENERATION_ERROR: Final = 3

_EPILOG: Final = """
Examples:
  %(prog)s teams.json
  %(prog)s teams.json -o ./teams_client -n teams_client
  %(prog)s teams.json -l kotlin -n com.example.teams
  %(prog)s teams.json -t ./my_templates -v
"""


def parse_command_line_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse the command line of ``oas-client-generator``."""
    parser = argparse.ArgumentParser(
        prog="oas-client-generator",
        description="Generate a typed API client from an OpenAPI 3.0 specification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_EPILOG,
    )
    parser.add_argument("spec_file", type=Path, metavar="SPEC_FILE", help="OpenAPI 3.0.x document (JSON)")
    parser.add_argument(
        "-o",
        "--output",
        dest="output_dir",
        type=Path,
        default=Path("./generated"),
        help="Directory the client is written to; its previous content is replaced (default: %(default)s)",
    )
    parser.add_argument(
        "-n",
        "--namespace",
        help="Package of the generated client (default: derived from the document title)",
    )
    parser.add_argument(
        "-l",
        "--language",
        dest="dialect",
        choices=sorted(DIALECTS),
        default="python",
        help="Language of the generated client (default: %(default)s)",
    )
    parser.add_argument(
        "-t",
        "--template-dir",
        type=Path,
        help="Directory overriding the bundled README and package templates",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every step and print the generated files")
    return parser.parse_args(args)


def configure_logging(*, verbose: bool) -> None:
    """Route library logging to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def report_parsed_spec(spec: ParsedSpec) -> None:
    print(f"{spec.info.title} {spec.info.version}: {len(spec.paths)} paths")
    print(f"Parsed {spec.operation_count} operations")
    print(f"Found {len(spec.components.schemas)} component schemas")


def report_generated_files(files: dict[Path, str]) -> None:
    print(f"Generated {len(files)} files:")
    for path in sorted(files):
        print(f"  {path}")


@contextlib.contextmanager
def preserved_output_dir(output_dir: Path) -> Iterator[None]:
    """Empty ``output_dir`` for a run and put its old content back if the run fails."""
    with tempfile.TemporaryDirectory(prefix="oas-client-generator-") as scratch:
        backup = None
        if output_dir.is_dir() and any(output_dir.iterdir()):
            backup = Path(scratch) / "previous"
            shutil.copytree(output_dir, backup)

        clean_output_directory(output_dir)
        try:
            yield
        except BaseException:
            if backup is not None:
                print(f"Error: Generation failed, restoring the previous content of {output_dir}", file=sys.stderr)
                restore_output_directory(backup, output_dir)
            else:
                shutil.rmtree(output_dir, ignore_errors=True)
            raise


def generate(parsed_args: argparse.Namespace) -> dict[Path, str]:
    """Parse the document named on the command line and generate its client."""
    spec = OASParser().parse_file(parsed_args.spec_file)
    if parsed_args.verbose:
        report_parsed_spec(spec)

    config = GenerationConfig(
        output_dir=parsed_args.output_dir,
        base_namespace=parsed_args.namespace or namespace_from_title(spec.info.title),
        dialect=parsed_args.dialect,
        template_dir=parsed_args.template_dir,
    )
    return ClientCodeGenerator().generate_client(spec, config)


def main(args: list[str] | None = None) -> int:
    """Generate a typed client from an OpenAPI specification."""
    parsed_args = parse_command_line_args(args)
    configure_logging(verbose=parsed_args.verbose)
    spec_file: Path = parsed_args.spec_file

    # Checked before the output directory is touched
    if not spec_file.is_file():
        print(f"Error: Specification file not found: {spec_file}", file=sys.stderr)
        return EXIT_FILE_NOT_FOUND

    try:
        with preserved_output_dir(parsed_args.output_dir):
            files = generate(parsed_args)
            write_files_to_disk(files)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename or spec_file}", file=sys.stderr)
        return EXIT_FILE_NOT_FOUND
    except json.JSONDecodeError as e:
        print(f"Error: {spec_file} is not valid JSON: {e}", file=sys.stderr)
        return EXIT_INVALID_JSON
    except (GeneratorError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if parsed_args.verbose:
            traceback.print_exc()
        return EXIT_GENERATION_ERROR

    if parsed_args.verbose:
        report_generated_files(files)
    print(f"Client generated successfully in {parsed_args.output_dir}")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
