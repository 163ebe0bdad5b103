#!/usr/bin/env python3
"""
Command line front end for the JVM bytecode tools.

Subcommands:
    parse       Parse a javap disassembly block
    describe    Print the JVMS description of one or more opcodes
    fetch-jvms  Download the JVMS instruction set chapter
    lookup      Find a method's block in a signature -> bytecode cache file
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import yaml

from .analysis.bytecode_lookup import match_member
from .analysis.instruction_parser import ParseResult, parse_instructions
from .docs.description_store import DescriptionStore
from .docs.jvms_client import DEFAULT_JVMS_CSS_URL, DEFAULT_JVMS_HTML_URL, JVMSClient
from .utils.logging_config import configure_logging

logger = structlog.get_logger()

# Configuration constants
DEFAULT_JVMS_DIR = "."
DEFAULT_LOG_LEVEL = "WARNING"
OUTPUT_FORMATS = ["text", "json", "yaml"]


def render_instructions(result: ParseResult, output_format: str) -> str:
    """Render parsed instructions in the requested output format."""
    if output_format == "text":
        return "\n".join(str(instruction) for instruction in result)

    data: Dict[str, Any] = {
        "instructions": [instruction.to_dict() for instruction in result],
        "skipped": [
            {"line_number": d.line_number, "line": d.line, "reason": d.reason}
            for d in result.diagnostics
        ],
    }
    if output_format == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    return json.dumps(data, indent=2)


def load_bytecode_cache(file_path: str) -> Dict[str, str]:
    """
    Load a signature -> disassembly mapping from a JSON or YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file does not contain a mapping of strings
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Bytecode cache file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        if Path(file_path).suffix.lower() in (".yaml", ".yml"):
            cache = yaml.safe_load(f)
        else:
            cache = json.load(f)

    if not isinstance(cache, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in cache.items()):
        raise ValueError("Bytecode cache must map signature strings to disassembly text")

    return cache


def cmd_parse(args: argparse.Namespace) -> int:
    if args.file == "-":
        text = sys.stdin.read()
    else:
        try:
            with open(args.file, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            logger.error("Could not read bytecode file", path=args.file, error=str(e))
            return 1

    result = parse_instructions(text)
    print(render_instructions(result, args.format))
    return 0


def cmd_describe(args: argparse.Namespace) -> int:
    store = DescriptionStore()
    JVMSClient(args.jvms_dir).load_into(store)

    if not store.is_loaded():
        logger.error("JVMS document not loaded, run fetch-jvms first", jvms_dir=args.jvms_dir)
        return 1

    for mnemonic in args.mnemonics:
        description = store.lookup(mnemonic)
        print(f"== {mnemonic}")
        print(description if description is not None else "No description available")
    return 0


def cmd_fetch_jvms(args: argparse.Namespace) -> int:
    client = JVMSClient(args.jvms_dir, html_url=args.html_url, css_url=args.css_url)
    if not client.fetch_jvms():
        return 1
    print(f"Saved {client.html_path}")
    return 0


def cmd_lookup(args: argparse.Namespace) -> int:
    try:
        cache = load_bytecode_cache(args.cache_file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Could not load bytecode cache", path=args.cache_file, error=str(e))
        return 1

    entry = match_member(args.signature, cache)
    if entry is None:
        print(f"Bytecode not available for {args.signature}")
        return 1

    matched, bytecode = entry
    print(f"// {matched}")
    print(render_instructions(parse_instructions(bytecode), args.format))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="JVM bytecode disassembly tools")
    parser.add_argument("--jvms-dir", default=os.environ.get("JVMS_DIR", DEFAULT_JVMS_DIR),
                        help="Directory holding the local JVMS copy (default: current directory)")
    parser.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL),
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help=f"Logging level (default: {DEFAULT_LOG_LEVEL})")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse a javap disassembly block")
    parse_cmd.add_argument("file", help="File containing the block, or - for stdin")
    parse_cmd.add_argument("--format", choices=OUTPUT_FORMATS, default="text")
    parse_cmd.set_defaults(func=cmd_parse)

    describe_cmd = subparsers.add_parser("describe", help="Describe opcodes using the local JVMS copy")
    describe_cmd.add_argument("mnemonics", nargs="+")
    describe_cmd.set_defaults(func=cmd_describe)

    fetch_cmd = subparsers.add_parser("fetch-jvms", help="Download the JVMS instruction set chapter")
    fetch_cmd.add_argument("--html-url", default=os.environ.get("JVMS_HTML_URL", DEFAULT_JVMS_HTML_URL))
    fetch_cmd.add_argument("--css-url", default=os.environ.get("JVMS_CSS_URL", DEFAULT_JVMS_CSS_URL))
    fetch_cmd.set_defaults(func=cmd_fetch_jvms)

    lookup_cmd = subparsers.add_parser("lookup", help="Find and parse a method's block in a bytecode cache file")
    lookup_cmd.add_argument("cache_file", help="JSON or YAML mapping of signature to disassembly text")
    lookup_cmd.add_argument("signature")
    lookup_cmd.add_argument("--format", choices=OUTPUT_FORMATS, default="text")
    lookup_cmd.set_defaults(func=cmd_lookup)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, json_output=args.json_logs)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
