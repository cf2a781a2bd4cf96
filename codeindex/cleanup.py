"""
Scratch directory removal.
"""
import logging
import shutil

from codeindex.config import IndexConfig

logger = logging.getLogger(__name__)


def remove_index_dir(config: IndexConfig) -> bool:
    """
    Remove the scratch directory with everything below it.

    A missing directory is a no-op. Errors are logged, never raised.

    Returns:
        True if the directory was removed
    """
    index_dir = config.index_dir

    if not index_dir.exists() and not index_dir.is_symlink():
        logger.debug(f"Index folder {index_dir} not present, nothing to remove")
        return False

    try:
        if index_dir.is_dir() and not index_dir.is_symlink():
            shutil.rmtree(index_dir)
        else:
            index_dir.unlink()
    except OSError as e:
        logger.warning(f"Unable to remove {index_dir}: {e}")
        return False

    logger.info("Index successfully removed")
    return True
