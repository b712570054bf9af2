# configuration.py
"""Provides functions to read/write IFS sysfs control files."""

import errno
import os
import typing

from config_file import CONTROL_VALUE_MAX
from log_config import get_logger

logger = get_logger(__name__)


def read_value(dir_path: str, name: str) -> str:
    """Reads a control file, trimming trailing newlines.

    At most CONTROL_VALUE_MAX bytes are kept; anything beyond is dropped.

    Args:
        dir_path: Directory holding the control file.
        name: Endpoint name (e.g. "status").

    Returns:
        The decoded value without trailing newlines.

    Raises:
        OSError: The file could not be opened or read.
    """
    path = os.path.join(dir_path, name)
    with open(path, 'rb') as f:
        raw = f.read(CONTROL_VALUE_MAX + 1)
    if len(raw) > CONTROL_VALUE_MAX:
        logger.debug("Value of %s exceeds %d bytes, truncating", path, CONTROL_VALUE_MAX)
        raw = raw[:CONTROL_VALUE_MAX]
    return raw.decode('ascii', errors='replace').rstrip('\n')


def write_value(dir_path: str, name: str, value: str) -> None:
    """Writes a value to an existing control file.

    The file is never created, so a missing endpoint surfaces as ENOENT.
    Sysfs may also report ENOENT from the write itself (e.g. when the
    requested test image does not exist); both reach the caller unchanged.

    Args:
        dir_path: Directory holding the control file.
        name: Endpoint name (e.g. "current_batch").
        value: Text to write, including any terminator the endpoint needs.

    Raises:
        ValueError: The value is longer than CONTROL_VALUE_MAX bytes.
        OSError: Opening or writing failed, or the write was short.
    """
    data = value.encode('ascii')
    if len(data) > CONTROL_VALUE_MAX:
        raise ValueError(f"value for {name} exceeds {CONTROL_VALUE_MAX} bytes")

    path = os.path.join(dir_path, name)
    fd = os.open(path, os.O_WRONLY | os.O_TRUNC)
    try:
        written = os.write(fd, data)
    finally:
        os.close(fd)
    if written != len(data):
        raise OSError(errno.EIO, f"short write ({written}/{len(data)} bytes)", path)


def check_access(dir_path: str, name: str, flags: int) -> None:
    """Opens and immediately closes a control file to verify permissions.

    Nothing is read or written, so sysfs side effects are not triggered.

    Raises:
        OSError: The file cannot be opened with the given flags.
    """
    fd = os.open(os.path.join(dir_path, name), flags)
    os.close(fd)


def get_config_value(dir_path: str, name: str) -> typing.Optional[str]:
    """Reads a control file, logging instead of raising.

    Returns:
        The trimmed value on success, None otherwise.
    """
    try:
        return read_value(dir_path, name)
    except OSError as e:
        logger.warning("Error reading from %s: %s", os.path.join(dir_path, name), e)
        return None
