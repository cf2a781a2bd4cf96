"""
Top-level dispatch for codeindex.

    codeindex                - extract dependencies, index with etags
    codeindex --update       - only re-index, do not extract jars
    codeindex --ctags        - index with ctags (Emacs-style TAGS)
    codeindex --vi           - index with ctags, vi/vim compatible tags
    codeindex --clean        - erase the scratch directory
"""
import logging
import sys
from typing import Sequence

from codeindex.cleanup import remove_index_dir
from codeindex.config import IndexConfig
from codeindex.ctags import generate_ctags
from codeindex.dependencies import extract_dependencies
from codeindex.etags import generate_etags
from codeindex.options import Command, Engine, IndexOptions, parse_flags

logger = logging.getLogger(__name__)


def generate_tags(config: IndexConfig, options: IndexOptions) -> None:
    """Generate tags with the engine selected in options."""
    if options.engine == Engine.CTAGS:
        generate_ctags(config, vi_tags=options.vi_tags, langmap=options.langmap)
    else:
        generate_etags(config)


def run_codeindex(config: IndexConfig, flags: Sequence[str]) -> None:
    """
    Run codeindex for a flag list.

    --update terminates the process with status 0 once tags are written;
    every other path returns to the caller.

    Args:
        config: Resolved codeindex configuration
        flags: Raw command-line flags
    """
    options = parse_flags(flags)
    logger.debug(f"Options: {options}")

    if options.command == Command.CLEAN:
        remove_index_dir(config)
    elif options.command == Command.UPDATE:
        generate_tags(config, options)
        sys.exit(0)
    else:
        extract_dependencies(config)
        generate_tags(config, options)
