#!/usr/bin/env python3
'''
sierradec command line interface

    sierradec program.sierra [-o out.cairo_dec] [--config sierradec.json5] [-v]
'''

import argparse
import logging
import sys
from pathlib import Path

from .common import *
from .pipeline import decompile_file

logger = logging.getLogger('sierradec')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog = 'sierradec',
        description = 'Decompile Sierra programs into readable pseudo-source'
    )

    parser.add_argument('input', help = 'Sierra text file')
    parser.add_argument('-o', '--output', help = 'Output file (default: config output_path)')
    parser.add_argument('--config', help = 'JSON5 config file')
    parser.add_argument('--indent', type = int, help = 'Spaces per nesting level')
    parser.add_argument('--catalog', help = 'Extra YAML catalog table')
    parser.add_argument('-v', '--verbose', action = 'store_true', help = 'Debug logging')

    return parser


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else getattr(logging, get_config().log_level, logging.WARNING)
    logging.basicConfig(level = level, format = '%(levelname)s %(name)s: %(message)s')


def write_output(text: str, path: str | Path):
    path = Path(path)
    with open(path, 'w', encoding = 'utf-8') as f:
        f.write(text)


def decompile(input_path: str, output_path: str) -> int:
    '''Decompile one file, 0 on success and 1 on any fatal error'''
    try:
        text = decompile_file(input_path)
        write_output(text, output_path)

    except DecompilerError as e:
        logger.error(f'{input_path}: {e}')
        return 1

    except OSError as e:
        logger.error(f'{input_path}: {e}')
        return 1

    functions = sum(1 for line in text.splitlines() if line.startswith('pub fn '))
    print(f'{input_path} -> {output_path}: {functions} function(s), {len(text)} chars')
    return 0


def main(argv: list[str] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(argv)

    if args.config and not Path(args.config).is_file():
        setup_logging(args.verbose)
        logger.error(f'config file not found: {args.config}')
        return 1

    init_config(argv)
    setup_logging(args.verbose)

    output = args.output or get_config().output_path
    return decompile(args.input, output)


if __name__ == '__main__':
    sys.exit(main())
