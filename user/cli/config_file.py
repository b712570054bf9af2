# config_file.py
"""Stores configuration constants and paths for the IFS self-test driver."""

import os # Used to build paths dynamically

# Base paths (the kernel registers one misc device per IFS test type)
IFS_MISC_BASE_PATH = "/sys/devices/virtual/misc"
IFS_INSTANCE_PREFIX = "intel_ifs_"
IFS_PRIMARY_INSTANCE = f"{IFS_INSTANCE_PREFIX}0"
CPU_SYSFS_PATH = "/sys/devices/system/cpu"

# Control endpoints inside each intel_ifs_<N> directory
STATUS_FILE = "status"
CURRENT_BATCH_FILE = "current_batch"
DETAILS_FILE = "details"
RUN_TEST_FILE = "run_test"
IMAGE_VERSION_FILE = "image_version"

# Values reported by the status endpoint
STATUS_PASS = "pass"
STATUS_FAIL = "fail"
STATUS_UNTESTED = "untested"
BATCH_NONE = "none"

# Test image selection
DEFAULT_TEST_ID: int = 1
IMAGE_ID_MAX: int = 0xFFFFFFFF
UNKNOWN_IMAGE_VERSION = "unknown"

# Driver populated error codes (mirroring linux/ifs/ifs.h)
# 0xFD: Test timed out before completing all the chunks.
# 0xFE: Not all scan chunks were executed. Maximum forward progress retries exceeded.
IFS_SW_TIMEOUT: int = 0xFD
IFS_SW_PARTIAL_COMPLETION: int = 0xFE
SOFT_DETAIL_CODES = frozenset({IFS_SW_TIMEOUT, IFS_SW_PARTIAL_COMPLETION})

# Module loader invocation (quiet mode, errors ignored by the caller)
MODPROBE_PATH = os.path.join("/sbin", "modprobe")
IFS_MODULE_NAME = "intel_ifs"
MODULE_LOADER_ARGV = (MODPROBE_PATH, "-q", IFS_MODULE_NAME)

# The kernel module prints at most a 64-bit value
CONTROL_VALUE_MAX: int = 256

# Process exit codes
EXIT_SUCCESS_CODE: int = 0
EXIT_FAIL_CODE: int = 1
EXIT_SKIP_CODE: int = 2
