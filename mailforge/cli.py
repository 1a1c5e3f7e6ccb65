"""Main entry point for the Mailforge CLI."""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from mailforge import __version__
from mailforge.config import settings
from mailforge.kernel.errors import ParseError
from mailforge.kernel.generator import generate_mjml
from mailforge.kernel.parser import parse_mjml
from mailforge.kernel.validate import sanitize_template, validate_template

COMMANDS = ("import", "export", "validate")


def print_help():
    """Print help message."""
    print(f"""
Mailforge CLI v{__version__}

Usage:
  mailforge <command> <file> [options]

Commands:
  import FILE.mjml      Parse MJML and print the template as JSON
  export FILE.json      Generate MJML from a template JSON file
  validate FILE.json    Check a template JSON file for structural defects

Options:
  -o, --output PATH     Write the result to PATH instead of stdout
  -h, --help            Show this help
  -v, --version         Show version

Environment:
  MAILFORGE_LOG_LEVEL   Logging level (default: WARNING)

Examples:
  mailforge import newsletter.mjml -o newsletter.json
  mailforge export newsletter.json > newsletter.mjml
  mailforge validate newsletter.json
""")


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        command: str | None (import, export, validate)
        path: str | None
        output: str | None
        show_help: bool
        show_version: bool
    """
    result = {
        "command": None,
        "path": None,
        "output": None,
        "show_help": False,
        "show_version": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]

        if arg in COMMANDS and result["command"] is None:
            result["command"] = arg
        elif arg in ("--output", "-o"):
            if i + 1 < len(args):
                result["output"] = args[i + 1]
                i += 1
            else:
                print("Error: --output requires a path")
                sys.exit(1)
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'mailforge --help' for usage.")
            sys.exit(1)
        elif result["command"] is not None and result["path"] is None:
            result["path"] = arg
        else:
            print(f"Unknown command: {arg}")
            print("Run 'mailforge --help' for usage.")
            sys.exit(1)

        i += 1

    return result


def read_json(path: str):
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"Error: {path} is not valid JSON: {e}")
        sys.exit(1)


def write_output(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
    else:
        print(text)


def run_import(path: str, output: str | None) -> int:
    try:
        template = parse_mjml(Path(path).read_text(encoding="utf-8"))
    except ParseError as e:
        print(f"Error: {e}")
        return 1
    write_output(json.dumps(template.to_dict(), indent=2, ensure_ascii=False), output)
    return 0


def run_export(path: str, output: str | None) -> int:
    template = sanitize_template(read_json(path))
    write_output(generate_mjml(template), output)
    return 0


def run_validate(path: str) -> int:
    result = validate_template(read_json(path), check_properties=True)
    if result.valid:
        print(f"{path}: valid")
        return 0
    print(f"{path}: {len(result.errors)} problem(s)")
    for error in result.errors:
        print(f"  {error}")
    return 1


def main():
    """Main entry point."""
    args = parse_args(sys.argv[1:])

    # Handle help and version first
    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"mailforge {__version__}")
        return

    if args["command"] is None:
        print_help()
        sys.exit(1)

    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args["path"] is None:
        print(f"Error: {args['command']} requires a file")
        sys.exit(1)

    if not Path(args["path"]).is_file():
        print(f"Error: {args['path']} not found")
        sys.exit(1)

    if args["command"] == "import":
        code = run_import(args["path"], args["output"])
    elif args["command"] == "export":
        code = run_export(args["path"], args["output"])
    else:
        code = run_validate(args["path"])

    sys.exit(code)


if __name__ == "__main__":
    main()
