#!/usr/bin/env python3
# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
podbubble - Ingest group records, run the layout, dump the graph.

Usage:
    podbubble                                  # default seed data to stdout
    podbubble --input groups.jsonl --output graph.jsonl --seed 7
    cat groups.jsonl | podbubble --input - --frame-pause 0 --group-pause 0
"""

import argparse
import sys
from pathlib import Path
import logging

from .config import IngestConfig, load_settings
from .errors import ConfigError
from .ingest import DEFAULT_GROUPS
from .io import read_groups, write_snapshot
from .model import GraphModel

logger = logging.getLogger("podbubble")


def setup_logging(level=logging.INFO, format_str=None):
    """
    Configure logging for the podbubble package.

    Args:
        level: Logging level (default: INFO)
        format_str: Custom format string for log messages
    """
    format_str = format_str or "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=format_str, stream=sys.stderr)
    logger.setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='podbubble',
        description='Force-directed layout of groups and their members',
    )
    parser.add_argument('--input', type=str, default=None,
                        help='JSON Lines group records ("-" for stdin, default: built-in seed data)')
    parser.add_argument('--output', type=Path, default=None,
                        help='Write nodes, edges and positions here (default: stdout)')
    parser.add_argument('--config', type=Path, default=None,
                        help='YAML settings file')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for initial placement')
    parser.add_argument('--iterations', type=int, default=None,
                        help='Layout iterations per run')
    parser.add_argument('--frame-pause', type=float, default=None,
                        help='Seconds between layout iterations')
    parser.add_argument('--group-pause', type=float, default=None,
                        help='Seconds between ingested groups')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    try:
        settings = load_settings(args.config)
        if args.seed is not None:
            settings.seed = args.seed
        if args.iterations is not None:
            settings.layout.iterations = args.iterations
        if args.frame_pause is not None:
            settings.layout.frame_pause = args.frame_pause
        if args.group_pause is not None:
            settings.ingest = IngestConfig(group_pause=args.group_pause)
        settings.layout.validate()
    except ConfigError as e:
        logger.error(str(e))
        return 2

    if args.input is None:
        records = list(DEFAULT_GROUPS)
    elif args.input == '-':
        records = list(read_groups(sys.stdin))
    else:
        try:
            with open(args.input, encoding='utf-8') as f:
                records = list(read_groups(f))
        except OSError as e:
            logger.error(f"Cannot read {args.input}: {e}")
            return 2

    with GraphModel(settings) as model:
        report = model.load(records, background=False)
        model.wait()
        snapshot = model.snapshot()

    logger.info(
        f"Laid out {len(snapshot.groups())} groups, {len(snapshot.members())} members "
        f"and {len(snapshot.edges)} edges "
        f"({len(report.skipped)} records skipped)"
    )

    if args.output is None:
        write_snapshot(snapshot, sys.stdout)
    else:
        with open(args.output, 'w', encoding='utf-8') as f:
            write_snapshot(snapshot, f)
        logger.info(f"Wrote {args.output}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
