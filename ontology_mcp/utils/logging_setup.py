"""
Central logging for the ontology MCP server
===========================================
Console output always goes to stderr: on the stdio transport stdout carries
the JSON-RPC stream and must stay clean.

With LOG_DIR set, rotating files are written as well:
- all.log, errors.log
- mcp.log, backends.log
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

FMT = "%(asctime)s|%(levelname)-8s|%(name)-25s|%(message)s"
FMT_DETAIL = "%(asctime)s|%(levelname)-8s|%(name)-25s|%(filename)s:%(lineno)d|%(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES, BACKUP = 10 * 1024 * 1024, 5

# Category loggers -> file name
CATEGORIES = [("mcp", "mcp.log"), ("services", "backends.log")]

_init = {"done": False}


class ColorFormatter(logging.Formatter):
    """Formatter with ANSI colors for console."""
    C = {10: '\033[36m', 20: '\033[32m', 30: '\033[33m', 40: '\033[31m', 50: '\033[35m'}
    R = '\033[0m'

    def format(self, r):
        return f"{self.C.get(r.levelno, '')}{super().format(r)}{self.R}"


def _handler(path: Path, level: int = logging.DEBUG) -> RotatingFileHandler:
    h = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP, encoding='utf-8')
    h.setLevel(level)
    h.setFormatter(logging.Formatter(FMT_DETAIL, DATE_FMT))
    return h


def _level(value: Union[int, str]) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    console_level: Union[int, str] = logging.INFO,
    log_dir: Optional[str] = None,
    enable_console: bool = True,
    force: bool = False,
) -> None:
    """Initialize logging. Call once at startup."""
    if _init["done"] and not force:
        return

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    if enable_console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(_level(console_level))
        fmt = ColorFormatter(FMT, DATE_FMT) if sys.stderr.isatty() else logging.Formatter(FMT, DATE_FMT)
        console.setFormatter(fmt)
        root.addHandler(console)

    if log_dir:
        target = Path(log_dir)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logging.getLogger("ontology_mcp").error(f"Log directory unavailable ({target}): {e}")
        else:
            root.addHandler(_handler(target / "all.log"))
            root.addHandler(_handler(target / "errors.log", logging.ERROR))
            for name, file in CATEGORIES:
                lg = logging.getLogger(f"ontology_mcp.{name}")
                lg.addHandler(_handler(target / file))
                lg.propagate = True

    # Third-party
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _init["done"] = True
