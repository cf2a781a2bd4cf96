"""
Dependency resolution and extraction.

Resolves the jars a project depends on through the host build tool and
unpacks each of them into the scratch directory, so the indexing engines
can see dependency sources next to the project's own.
"""
import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from codeindex.config import IndexConfig

logger = logging.getLogger(__name__)


ARCHIVE_SUFFIXES = ('.jar', '.zip')


def parse_classpath(output: str, project_root: Path) -> List[str]:
    """
    Pick archive entries out of classpath command output.

    Args:
        output: Raw stdout of the classpath command
        project_root: Base for relative classpath entries

    Returns:
        Absolute archive paths, in classpath order, without duplicates
    """
    archives: List[str] = []
    seen = set()

    for entry in output.strip().split(os.pathsep):
        entry = entry.strip()
        if not entry or not entry.lower().endswith(ARCHIVE_SUFFIXES):
            continue

        path = Path(entry)
        if not path.is_absolute():
            path = project_root / path
        archive = str(path)

        if archive not in seen:
            seen.add(archive)
            archives.append(archive)

    return archives


def resolve_dependency_archives(config: IndexConfig) -> List[str]:
    """
    Resolve all dependency archives for the project.

    Runs the classpath command in the project root and appends any archives
    listed in the project config file. A failing classpath command is logged
    and leaves only the configured archives.

    Args:
        config: Resolved codeindex configuration

    Returns:
        Ordered list of absolute archive paths
    """
    archives: List[str] = []
    cmd = list(config.classpath_command)

    try:
        result = subprocess.run(
            cmd,
            cwd=config.project_root,
            capture_output=True,
            text=True,
            errors='replace'
        )
    except OSError as e:
        logger.warning(f"Unable to run {' '.join(cmd)}: {e}")
    else:
        if result.returncode != 0:
            logger.warning(f"Failed to resolve dependencies with {' '.join(cmd)}. Got:\n{result.stderr}")
        else:
            archives = parse_classpath(result.stdout, config.project_root)

    for archive in config.extra_archives:
        if archive not in archives:
            archives.append(archive)

    logger.debug(f"Resolved {len(archives)} dependency archives")
    return archives


def ensure_index_dir(config: IndexConfig) -> bool:
    """
    Create the scratch directory if needed.

    Returns:
        True if the directory exists afterwards
    """
    try:
        config.index_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Unable to create {config.index_dir}: {e}")

    return config.index_dir.is_dir()


def extract_archive(config: IndexConfig, archive: str) -> bool:
    """
    Extract a single archive into the scratch directory.

    Returns:
        True on success. Failures are logged, never raised.
    """
    cmd = list(config.extract_command) + [archive]

    try:
        result = subprocess.run(
            cmd,
            cwd=config.index_dir,
            capture_output=True,
            text=True,
            errors='replace'
        )
    except OSError as e:
        logger.warning(f"Failed to extract {archive} Got:\n {e}")
        return False

    if result.returncode != 0:
        logger.warning(f"Failed to extract {archive} Got:\n {result.stderr}")
        return False

    return True


def extract_dependencies(
    config: IndexConfig,
    archives: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Extract all dependency archives into the scratch directory.

    One bad archive never stops the batch. If the scratch directory cannot
    be created nothing is extracted.

    Args:
        config: Resolved codeindex configuration
        archives: Archives to extract (default: resolve from the project)

    Returns:
        Archives that failed to extract
    """
    logger.info("Scanning and extracting jars...")

    if not ensure_index_dir(config):
        logger.warning(f"Unable to create {config.index_dir} folder. Indexing will NOT be done")
        return []

    if archives is None:
        archives = resolve_dependency_archives(config)

    failed = [archive for archive in archives if not extract_archive(config, archive)]

    if failed:
        logger.info(f"Extracted {len(archives) - len(failed)} of {len(archives)} archives")
    else:
        logger.debug(f"Extracted {len(archives)} archives into {config.index_dir}")

    return failed
