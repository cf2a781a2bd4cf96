"""
Tag generation with etags.

etags only appends to its output, so the old TAGS file is removed first and
every matching source file is then appended one at a time.
"""
import logging
import os
import subprocess
from pathlib import Path
from typing import Iterator

from codeindex.config import IndexConfig

logger = logging.getLogger(__name__)


SOURCE_SUFFIXES = frozenset({'.clj', '.cljs', '.cljc', '.edn'})
METADATA_DIR = 'META-INF'
BUILD_DESCRIPTOR = 'project.clj'

# Captures the name after any def* form, e.g. (defn foo, (defmacro bar
DEF_REGEX = r"--regex=/[ \t\(]*def[a-z]* \([a-z-!?]+\)/\1/"
# Captures the namespace name of an ns form
NS_REGEX = r"--regex=/[ \t\(]*ns \([a-z0-9.\-]+\)/\1/"


def walk_post_order(root: Path) -> Iterator[Path]:
    """
    Yield every entry under root, children before their directory.

    Entries are visited in name order. Directory symlinks are yielded but
    not followed. An unreadable directory is logged and yielded without
    its contents.
    """
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.warning(f"Skipping {root}: {e}")
        entries = []

    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            yield from walk_post_order(path)
        else:
            yield path

    yield Path(root)


def should_index(rel_path: Path) -> bool:
    """
    Check whether a file (relative to the project root) gets indexed.

    Examples:
        >>> should_index(Path('src/app/core.clj'))
        True
        >>> should_index(Path('.lein-codeindex/META-INF/leiningen/foo/project.clj'))
        False
        >>> should_index(Path('README.md'))
        False
    """
    if METADATA_DIR in rel_path.parts[:-1]:
        return False
    if rel_path.name == BUILD_DESCRIPTOR:
        return False
    return rel_path.suffix in SOURCE_SUFFIXES


def iter_source_files(root: Path) -> Iterator[Path]:
    """Yield indexable regular files under root as paths relative to root."""
    for path in walk_post_order(root):
        if not path.is_file():
            continue
        rel_path = path.relative_to(root)
        if should_index(rel_path):
            yield rel_path


def index_file(config: IndexConfig, rel_path: Path) -> bool:
    """
    Append tags for a single file to TAGS.

    Returns:
        True if etags reported nothing on stderr
    """
    cmd = list(config.etags_command) + ['-a', DEF_REGEX, NS_REGEX, str(rel_path)]

    try:
        result = subprocess.run(
            cmd,
            cwd=config.project_root,
            capture_output=True,
            text=True,
            errors='replace'
        )
    except OSError as e:
        logger.warning(f"Failed to index {rel_path}: {e}")
        return False

    if result.stderr:
        logger.warning(f"etags reported for {rel_path}:\n{result.stderr}")
        return False

    return True


def generate_etags(config: IndexConfig) -> int:
    """
    Regenerate TAGS for the project root using etags.

    Args:
        config: Resolved codeindex configuration

    Returns:
        Number of files handed to etags
    """
    logger.info("Indexing using etags...")

    tag_file = config.etags_file
    if tag_file.exists() or tag_file.is_symlink():
        try:
            tag_file.unlink()
        except OSError as e:
            logger.warning(f"Unable to remove old {tag_file}: {e}")

    count = 0
    for rel_path in iter_source_files(config.project_root):
        index_file(config, rel_path)
        count += 1

    logger.debug(f"etags processed {count} files")
    return count
