# discovery.py
"""Locates IFS device instances, loading the kernel module when needed."""

import os
import subprocess
import typing
from dataclasses import dataclass

from config_file import (
    IFS_MISC_BASE_PATH, IFS_INSTANCE_PREFIX, IFS_PRIMARY_INSTANCE,
    IFS_MODULE_NAME, MODULE_LOADER_ARGV
)
from log_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeviceInstance:
    """One intel_ifs_<N> directory; endpoints are opened per operation."""
    name: str
    path: str


def ensure_module_loaded(argv: typing.Sequence[str] = MODULE_LOADER_ARGV) -> bool:
    """Runs the module loader quietly and waits for it.

    Failure of any kind (missing binary, non-zero exit) is logged at debug
    level only; the caller decides what a still-missing device means.

    Returns:
        True if the loader ran and exited with status 0.
    """
    try:
        proc = subprocess.run(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        logger.debug("Failed to run %s: %s", argv[0], e)
        return False

    if proc.returncode != 0:
        logger.debug("%s exited with status %d", argv[0], proc.returncode)
        return False
    return True


def acquire_base_handle(
    misc_base: str = IFS_MISC_BASE_PATH,
    loader: typing.Callable[[], bool] = ensure_module_loaded,
) -> typing.Optional[str]:
    """Returns the primary instance directory, loading the module if absent.

    The loader is invoked at most once, followed by a single retry.

    Returns:
        Path of intel_ifs_0, or None if it is still missing.
    """
    base = os.path.join(misc_base, IFS_PRIMARY_INSTANCE)
    if os.path.isdir(base):
        return base

    logger.debug("%s not found, trying to load %s", base, IFS_MODULE_NAME)
    loader()

    if os.path.isdir(base):
        return base
    return None


def list_instances(misc_base: str = IFS_MISC_BASE_PATH) -> typing.List[DeviceInstance]:
    """Enumerates IFS instance directories in directory order.

    Raises:
        OSError: The misc base directory cannot be listed.
    """
    instances = []
    with os.scandir(misc_base) as it:
        for entry in it:
            if not entry.name.startswith(IFS_INSTANCE_PREFIX):
                continue
            if not entry.is_dir():
                continue
            instances.append(DeviceInstance(entry.name, entry.path))
    return instances
