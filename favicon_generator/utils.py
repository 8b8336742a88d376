import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def normalize_prefix(path_prefix):
    """
    Make sure a non-empty path prefix ends with a slash.

    :param path_prefix: URL prefix such as "/" or "/static/icons"
    :return: The prefix, ready to have a filename appended to it
    """
    if path_prefix is None:
        return "/"
    if path_prefix and not path_prefix.endswith("/"):
        return path_prefix + "/"
    return path_prefix


def atomic_write_bytes(path, data):
    """
    Writes bytes to a file so that readers never see a partial file.

    The data goes to a temporary file in the same directory. It is flushed,
    fsynced and then renamed over the target.

    :param path: Destination file
    :param data: Bytes to write
    :return: The destination path
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as tmp_file:
            tmp_file.write(data)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise

    logger.debug(f"Wrote {len(data)} bytes to {path}")
    return path


def atomic_write_text(path, text):
    return atomic_write_bytes(path, text.encode("utf-8"))
