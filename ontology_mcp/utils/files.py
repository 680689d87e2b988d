from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os

logger = logging.getLogger("ontology_mcp.files")

PathLike = Union[str, Path]


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def default_file_name(prefix: str, file_name: Optional[str] = None, sep: str = "_") -> str:
    """Caller-supplied base name, or ``{prefix}{sep}{epoch ms}``."""
    return file_name or f"{prefix}{sep}{timestamp_ms()}"


async def ensure_dir(directory: PathLike) -> Path:
    path = Path(directory)
    await aiofiles.os.makedirs(path, exist_ok=True)
    return path


async def write_bytes(path: PathLike, data: bytes) -> Path:
    """Write ``data`` to ``path`` and return the path."""
    target = Path(path)
    await ensure_dir(target.parent)
    async with aiofiles.open(target, "wb") as fh:
        await fh.write(data)
    logger.info("Saved %s (%d bytes)", target, len(data))
    return target


async def file_exists(path: PathLike) -> bool:
    return await aiofiles.os.path.isfile(path)


async def read_bytes(path: PathLike) -> bytes:
    async with aiofiles.open(path, "rb") as fh:
        return await fh.read()
