#!/usr/bin/env python3
"""
Command-line interface for pyjmm - Jmm to Jasmin compiler.
"""

import argparse
import logging
import sys
from pathlib import Path

from .compiler import CompilationResult, Compiler
from .config import UNCONSTRAINED, CompilerConfig
from .reports import CompileError


def _read_source(source_file: str) -> str:
    path = Path(source_file)
    if not path.exists():
        print(f"Error: File not found: {source_file}", file=sys.stderr)
        sys.exit(1)
    return path.read_text(encoding="utf-8")


def _config(args) -> CompilerConfig:
    try:
        return CompilerConfig(optimize=args.optimize, register_budget=args.registers)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _compile(args) -> CompilationResult:
    """Compile the file named by ``args``, exiting on any error."""
    source = _read_source(args.file)
    try:
        result = Compiler(_config(args)).compile_source(source)
    except CompileError as e:
        print(f"Error compiling {args.file}: {e}", file=sys.stderr)
        sys.exit(1)

    for report in result.reports:
        print(report, file=sys.stderr)
    if not result.succeeded:
        print(f"Error compiling {args.file}: {len(result.errors)} error(s)", file=sys.stderr)
        sys.exit(1)
    return result


def parse_command(args):
    """Parse a Jmm file and output the AST as JSON."""
    source = _read_source(args.file)
    try:
        ast = Compiler().parse(source)
    except CompileError as e:
        print(f"Error parsing {args.file}: {e}", file=sys.stderr)
        sys.exit(1)
    print(ast.to_json())


def ir_command(args):
    """Compile a Jmm file and print its IR."""
    result = _compile(args)
    print(result.ir.to_text(), end="")


def compile_command(args):
    """Compile a Jmm file to a Jasmin ``.j`` file."""
    result = _compile(args)

    output_dir = Path(args.output_dir) if args.output_dir else Path(".")
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / f"{result.ir.class_name}.j"
    target.write_text(result.assembly, encoding="utf-8")

    if not args.quiet:
        print(f"Wrote {target}")


def _add_pipeline_options(parser: argparse.ArgumentParser):
    parser.add_argument(
        "file",
        help="Jmm source file",
    )
    parser.add_argument(
        "-o", "--optimize",
        action="store_true",
        help="Enable constant propagation and folding",
    )
    parser.add_argument(
        "-r", "--registers",
        type=int,
        default=UNCONSTRAINED,
        metavar="N",
        help="Allocate registers using at most N local slots per method (default: -1, no allocation)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyjmm",
        description="Compile Jmm source files to Jasmin assembly",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log pipeline stages to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse a Jmm file and output the AST as JSON",
    )
    parse_parser.add_argument(
        "file",
        help="Jmm source file",
    )
    parse_parser.set_defaults(func=parse_command)

    # IR command
    ir_parser = subparsers.add_parser(
        "ir",
        help="Compile a Jmm file and print the intermediate representation",
    )
    _add_pipeline_options(ir_parser)
    ir_parser.set_defaults(func=ir_command)

    # Compile command
    compile_parser = subparsers.add_parser(
        "compile",
        help="Compile a Jmm file to a Jasmin .j file",
    )
    _add_pipeline_options(compile_parser)
    compile_parser.add_argument(
        "-d", "--output-dir",
        help="Output directory for the .j file (default: current directory)",
    )
    compile_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress summary output",
    )
    compile_parser.set_defaults(func=compile_command)

    return parser


def main(argv=None):
    """Main entry point for the pyjmm CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    args.func(args)


if __name__ == "__main__":
    main()
