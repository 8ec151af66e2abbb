# sidel/__init__.py
"""
sidel - rule-driven syntax highlighting driven by declarative ``.sidel`` files.

Command line:
    sidel show FILE [--language NAME]   print FILE highlighted for a truecolor terminal
    sidel languages                     list known languages and their extensions
    sidel check FILE                    validate a .sidel definition
"""

import argparse
import sys
from pathlib import Path

__version__ = "0.3.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sidel",
        description="Rule-driven syntax highlighting for the terminal",
    )
    parser.add_argument("--version", "-v", action="version", version=f"sidel {__version__}")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set console logging level",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write logs to ~/.config/sidel/logs/sidel.log",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    show = commands.add_parser("show", help="Print a file with highlighting")
    show.add_argument("file", help="File to highlight")
    show.add_argument("--language", "-l", metavar="NAME", help="Override language detection")
    show.add_argument(
        "--by-line",
        action="store_true",
        help="Highlight line by line, as an editor does while typing",
    )

    commands.add_parser("languages", help="List known languages")

    check = commands.add_parser("check", help="Validate a .sidel definition file")
    check.add_argument("file", help="Definition file to validate")
    return parser


def _cmd_show(args, registry) -> int:
    from .highlighter import highlight_lines, render_ansi

    path = Path(args.file)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"sidel: cannot read {path}: {e}", file=sys.stderr)
        return 1

    language_id = args.language or registry.resolve_language(path)
    compiled = registry.get_compiled_language(language_id)

    if args.by_line:
        lines = text.split("\n")
        rendered = [
            render_ansi(line, spans)
            for line, spans in zip(lines, highlight_lines(text, compiled, registry.config.match_timeout))
        ]
        output = "\n".join(rendered)
    else:
        output = render_ansi(text, registry.highlight(text, compiled))

    sys.stdout.write(output)
    if output and not output.endswith("\n"):
        sys.stdout.write("\n")
    return 0


def _cmd_languages(registry) -> int:
    for entry in registry.manifest.entries():
        extensions = ", ".join(f".{ext}" for ext in entry.extensions)
        print(f"{entry.name:<12} {extensions}")
    return 0


def _cmd_check(args) -> int:
    from .highlighter.rules import compile_language
    from .settings.definitions import parse_definition
    from .utils.exceptions import DefinitionParseError

    path = Path(args.file)
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"sidel: cannot read {path}: {e}", file=sys.stderr)
        return 1

    try:
        definition, _rule_errors = parse_definition(source, path.stem)
    except DefinitionParseError as e:
        print(f"{path}: error: {e.reason}")
        return 1

    compiled = compile_language(definition)
    for warning in compiled.warnings:
        print(f"{path}: warning: {warning}")
    print(
        f"{path}: {len(compiled.rules)} usable rules, "
        f"{len(compiled.warnings)} skipped, default color {compiled.default_color}"
    )
    return 0


def main(argv=None) -> int:
    """Main entry point for the command line."""
    from .utils import logger as logger_mod

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logger_mod.enable_debug_mode()
    elif args.log_level:
        logger_mod.set_console_log_level(args.log_level)
    if args.log_file:
        logger_mod.set_log_to_file_enabled(True)

    logger = logger_mod.get_logger("sidel.main")

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "check":
        return _cmd_check(args)

    from .highlighter import LanguageRegistry

    registry = LanguageRegistry.from_environment()
    try:
        if args.command == "show":
            return _cmd_show(args, registry)
        return _cmd_languages(registry)
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        return 130
    except BrokenPipeError:
        return 0


if __name__ == "__main__":
    sys.exit(main())
