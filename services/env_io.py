"""Reading and writing KEY=VALUE files on disk"""
from core.env_format import parse_content
from core.errors import FileReadError, FileWriteError
from utils.logging_setup import get_logger

logger = get_logger("env_io")

ENCODING = "utf-8"


def read_text(path):
    """Read a file without translating its line endings."""
    try:
        with open(path, "r", encoding=ENCODING, newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(path, e) from e


def write_text(path, content):
    """Write content exactly as given (no newline translation)."""
    try:
        with open(path, "w", encoding=ENCODING, newline="") as f:
            f.write(content)
    except OSError as e:
        raise FileWriteError(path, e) from e
    logger.debug(f"Wrote {len(content)} chars to {path}")


def read_env_file(path):
    return parse_content(path, read_text(path))


def read_env_files(paths):
    return [read_env_file(path) for path in paths]
