# topology.py
"""Reads logical CPU topology (core id, sibling thread index) from sysfs."""

import os
import typing
from dataclasses import dataclass

import configuration as conf
from config_file import CPU_SYSFS_PATH


@dataclass(frozen=True)
class CpuInfo:
    """Identity of one logical CPU.

    Attributes:
        cpu_number: Logical CPU number as the kernel numbers it.
        core_id: Physical core id within the package.
        thread_id: Index of this CPU among its core's hardware threads.
    """
    cpu_number: int
    core_id: int
    thread_id: int

    @property
    def is_primary_thread(self) -> bool:
        return self.thread_id == 0


def parse_cpu_list(text: str) -> typing.List[int]:
    """Expands a kernel cpu list such as '0-3,8,10-11'.

    Raises:
        ValueError: The text is not a valid cpu list.
    """
    cpus: typing.List[int] = []
    for part in text.strip().split(','):
        if not part:
            continue
        first, sep, last = part.partition('-')
        if sep:
            start, end = int(first), int(last)
            if end < start:
                raise ValueError(f"Invalid cpu range '{part}'")
            cpus.extend(range(start, end + 1))
        else:
            cpus.append(int(first))
    return cpus


def online_cpus(cpu_sysfs: str = CPU_SYSFS_PATH) -> typing.List[int]:
    """Returns the online logical CPUs.

    Raises:
        OSError: The online list could not be read.
    """
    return parse_cpu_list(conf.read_value(cpu_sysfs, "online"))


def read_cpu_info(cpu_number: int, cpu_sysfs: str = CPU_SYSFS_PATH) -> CpuInfo:
    """Reads the topology of one CPU.

    CPUs without a topology directory are treated as single-threaded cores.
    """
    topology = os.path.join(cpu_sysfs, f"cpu{cpu_number}", "topology")
    try:
        core_id = int(conf.read_value(topology, "core_id"))
        siblings = parse_cpu_list(conf.read_value(topology, "thread_siblings_list"))
    except (OSError, ValueError):
        return CpuInfo(cpu_number, cpu_number, 0)

    thread_id = siblings.index(cpu_number) if cpu_number in siblings else 0
    return CpuInfo(cpu_number, core_id, thread_id)
