#!/usr/bin/env python3
"""
codeindex - index code in a Clojure project and all its dependencies.

Scans .clj, .cljs, .cljc and .edn files of the project and of every
dependency jar, and writes a tag file usable from Emacs, Vi/Vim and other
editors for symbol navigation.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from codeindex import __version__
from codeindex.config import INDEX_DIR_ENV, load_config
from codeindex.errors import CodeindexError
from codeindex.runner import run_codeindex

FLAGS_HELP = """\
flags:
  --clean         erase the scratch directory (dependency sources)
  --update        do not extract dependencies, only update the index
  --ctags         index with ctags instead of etags
  --vi, --vim     write Vi/Vim compatible tags (implies --ctags)
  --no-langmap    do not pass the built-in Clojure definitions to ctags

Leiningen spellings (:clean, :update, :vi, ...) are accepted too.

environment:
  {env}   scratch directory (default: .lein-codeindex)
""".format(env=INDEX_DIR_ENV)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='codeindex',
        description='Index code in this project and all dependencies using etags or ctags.',
        epilog=FLAGS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        '--project-root',
        default='.',
        help='Project root directory (default: current directory)'
    )
    parser.add_argument(
        '--config',
        help='Path to config file (default: <project-root>/.codeindex.yaml)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args, flags = parser.parse_known_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )

    try:
        config = load_config(
            Path(args.project_root),
            config_path=Path(args.config) if args.config else None,
        )
    except CodeindexError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    run_codeindex(config, flags)


if __name__ == '__main__':
    main()
