"""
Tag generation with ctags.

ctags scans the whole tree in one recursive run. By default it is taught
Clojure through a built-in language definition; with --no-langmap the
user's own ctags configuration (e.g. ~/.ctags) is used instead.
"""
import logging
import subprocess
from typing import List

from codeindex.config import IndexConfig

logger = logging.getLogger(__name__)


EMACS_FORMAT_FLAG = '-e'
VI_FORMAT_FLAG = '--format=2'

_SYMBOL = r"([-[:alnum:]*+!_:\/.?]+)"


def _form(head: str, kind: str) -> str:
    return rf"--regex-clojure=/\([ \t]*{head}[ \t]+{_SYMBOL}/\1/{kind}/"


CLOJURE_LANGMAP = [
    "--langdef=clojure",
    "--langmap=clojure:.clj",
    "--langmap=clojure:.cljs",
    "--langmap=clojure:.cljc",
    "--langmap=clojure:.edn",
    _form("create-ns", "n,namespace"),
    _form("def", "d,definition"),
    _form("defn-?", "f,function"),
    _form("defmacro", "m,macro"),
    _form("definline", "i,inline"),
    _form("defmulti", "a,multimethod definition"),
    _form("defmethod", "b,multimethod instance"),
    _form("defonce", "c,definition (once)"),
    _form("defstruct", "s,struct"),
    _form("intern", "v,intern"),
    _form("ns", "n,namespace"),
]


def build_ctags_command(config: IndexConfig, vi_tags: bool, langmap: bool) -> List[str]:
    """
    Build the ctags argument vector.

    Args:
        config: Resolved codeindex configuration
        vi_tags: Write vi-style 'tags' instead of Emacs-style 'TAGS'
        langmap: Include the built-in Clojure language definition

    Returns:
        Command list suitable for subprocess.run
    """
    cmd = list(config.ctags_command) + ['-R']
    cmd.append(VI_FORMAT_FLAG if vi_tags else EMACS_FORMAT_FLAG)
    if langmap:
        cmd.extend(CLOJURE_LANGMAP)
    return cmd


def generate_ctags(config: IndexConfig, vi_tags: bool = False, langmap: bool = True) -> bool:
    """
    Generate tags for the project root using ctags.

    A failing run is logged, not raised.

    Returns:
        True if ctags exited successfully
    """
    logger.info("Indexing using ctags...")

    cmd = build_ctags_command(config, vi_tags, langmap)

    try:
        result = subprocess.run(
            cmd,
            cwd=config.project_root,
            capture_output=True,
            text=True,
            errors='replace'
        )
    except OSError as e:
        logger.warning(f"Unable to run {cmd[0]}: {e}")
        return False

    if result.returncode != 0:
        logger.warning(f"ctags exited with status {result.returncode}. Got:\n{result.stderr}")
        return False

    return True
