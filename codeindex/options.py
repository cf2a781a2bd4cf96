"""
Command-line flag parsing for codeindex.

The flag vocabulary is small and flat. The first flag picks the command;
the remaining flags are only inspected by set membership to pick the tag
engine and its options.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

logger = logging.getLogger(__name__)


class Command(str, Enum):
    """Execution path chosen by the first flag."""
    CLEAN = "clean"      # Remove the scratch directory only
    UPDATE = "update"    # Regenerate tags without extracting dependencies
    FULL = "full"        # Extract dependencies, then generate tags


class Engine(str, Enum):
    """External indexing engine."""
    ETAGS = "etags"
    CTAGS = "ctags"


FLAG_CLEAN = "--clean"
FLAG_UPDATE = "--update"
FLAG_CTAGS = "--ctags"
FLAG_VI = "--vi"
FLAG_VIM = "--vim"
FLAG_NO_LANGMAP = "--no-langmap"

KNOWN_FLAGS = frozenset({
    FLAG_CLEAN,
    FLAG_UPDATE,
    FLAG_CTAGS,
    FLAG_VI,
    FLAG_VIM,
    FLAG_NO_LANGMAP,
})


@dataclass(frozen=True)
class IndexOptions:
    """Parsed form of the flag list."""
    command: Command = Command.FULL
    engine: Engine = Engine.ETAGS
    vi_tags: bool = False
    langmap: bool = True


def normalize_flag(flag: str) -> str:
    """
    Map Leiningen keyword spellings to long options.

    Examples:
        >>> normalize_flag(':vim')
        '--vim'
        >>> normalize_flag('--ctags')
        '--ctags'
    """
    if flag.startswith(':'):
        return '--' + flag[1:]
    return flag


def unknown_flags(flags: Iterable[str]) -> List[str]:
    """Return flags outside the recognized vocabulary, in input order."""
    return [f for f in flags if normalize_flag(f) not in KNOWN_FLAGS]


def parse_flags(flags: Sequence[str]) -> IndexOptions:
    """
    Parse a flat flag list into IndexOptions.

    Args:
        flags: Raw flags as given on the command line

    Returns:
        IndexOptions describing the command and engine settings
    """
    normalized = [normalize_flag(f) for f in flags]

    for flag in unknown_flags(flags):
        logger.warning(f"Ignoring unrecognized flag: {flag}")

    first = normalized[0] if normalized else None
    if first == FLAG_CLEAN:
        command = Command.CLEAN
    elif first == FLAG_UPDATE:
        command = Command.UPDATE
    else:
        command = Command.FULL

    present = set(normalized)
    vi_tags = FLAG_VI in present or FLAG_VIM in present
    if FLAG_CTAGS in present or vi_tags:
        engine = Engine.CTAGS
    else:
        engine = Engine.ETAGS

    return IndexOptions(
        command=command,
        engine=engine,
        vi_tags=vi_tags,
        langmap=FLAG_NO_LANGMAP not in present,
    )
