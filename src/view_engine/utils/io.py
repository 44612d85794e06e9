"""
Async file reads used by the engine.
"""
import logging

import aiofiles

from ..error.exceptions import TemplateReadError

logger = logging.getLogger(__name__)


async def read_text(path: str) -> str:
    """
    Read a text file without blocking the event loop.

    Args:
        path: File location

    Returns:
        File content

    Raises:
        TemplateReadError: If the file cannot be read
    """
    try:
        async with aiofiles.open(path, mode='r', encoding='utf-8') as f:
            content = await f.read()
    except OSError as e:
        raise TemplateReadError(path, e.strerror or str(e)) from e
    logger.debug("Read %d bytes from file: %s", len(content), path, extra={"location": path})
    return content
