# Copyright 2026 OSOQuery Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the osoquery command-line interface."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from osoquery.cli.render import make_styles, render_record
from osoquery.config import QueryConfig, QueryConfigError, find_query_config, load_query_config
from osoquery.model.entities import ShaderRecord
from osoquery.parser.errors import OsoError
from osoquery.parser.parser import ParseOptions
from osoquery.search import ShaderNotFoundError, open_shader, split_search_path
from osoquery.serialization import parameter_to_dict, to_json

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the osoquery CLI."""
    parser = argparse.ArgumentParser(
        prog="osoquery",
        description="Query the parameters of compiled OSL shaders (.oso files).",
    )
    parser.add_argument(
        "files",
        nargs="+",
        metavar="FILE",
        help="Shader files or names to query (the .oso extension is optional)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show every parameter with its metadata",
    )
    parser.add_argument(
        "-p",
        "--searchpath",
        default=None,
        help="Colon-separated list of directories to search for shaders",
    )
    parser.add_argument(
        "--param",
        default=None,
        metavar="NAME",
        help="Only show the parameter with this name",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    parser.add_argument(
        "--runstats",
        action="store_true",
        help="Report the parse time of each file on stderr",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="FILE",
        help="Configuration file (default: nearest .osoquery.yaml, if any)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()
    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Query every file on the command line, isolating per-file failures."""
    _configure_logging(args.debug)

    try:
        config = _load_config(args.config)
    except QueryConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    search_path = split_search_path(args.searchpath) + [Path(p) for p in config.search_path]
    options = ParseOptions(discard_output_defaults=config.discard_output_defaults)
    styles = make_styles(config.color and not args.no_color and sys.stdout.isatty())

    failures = 0
    for name in args.files:
        start = time.perf_counter()
        try:
            record = open_shader(name, search_path, options)
        except ShaderNotFoundError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            failures += 1
            continue
        except (OsoError, OSError) as exc:
            print(f"Error reading {name}: {exc}", file=sys.stderr)
            failures += 1
            continue
        elapsed = time.perf_counter() - start

        if args.json:
            if not _print_json(record, args.param):
                failures += 1
        else:
            if args.param is not None and record.param_by_name(args.param) is None:
                print(f"Error: parameter '{args.param}' not found in {name}", file=sys.stderr)
                failures += 1
            for line in render_record(record, styles, verbose=args.verbose, param_filter=args.param):
                print(line)

        if args.runstats:
            print(f"Parse time: {elapsed * 1000.0:.3f}ms", file=sys.stderr)

    if failures:
        logger.debug(f"{failures} of {len(args.files)} file(s) failed")
        return 1
    return 0


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_config(path: Path | None) -> QueryConfig:
    """Load the explicit config file, else the nearest one, else defaults."""
    if path is None:
        path = find_query_config(Path.cwd())
        if path is None:
            return QueryConfig()
    logger.debug(f"Using config file {path}")
    return load_query_config(path)


def _print_json(record: ShaderRecord, param_filter: str | None) -> bool:
    """Print *record* (or one of its parameters) as JSON; return False if the parameter is missing."""
    if param_filter is None:
        print(to_json(record, indent=2))
        return True
    param = record.param_by_name(param_filter)
    if param is None:
        print(f"Error: parameter '{param_filter}' not found in {record.name}", file=sys.stderr)
        return False
    print(json.dumps(parameter_to_dict(param), indent=2))
    return True
