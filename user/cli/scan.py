# scan.py
"""Runs the IFS scan: session init (image selection) and per-core execution.

Requires the intel_ifs kernel module and firmware test images under
/lib/firmware. The external scheduler calls init_scan() once per scan
session and run_on_core() once per logical CPU, pinned to that CPU.
"""

import enum
import os
import typing
from dataclasses import dataclass

import configuration as conf
from batch_state import select_next_image
from config_file import (
    IFS_MISC_BASE_PATH, RUN_TEST_FILE, CURRENT_BATCH_FILE, STATUS_FILE,
    DETAILS_FILE, IMAGE_VERSION_FILE, STATUS_PASS, STATUS_FAIL,
    UNKNOWN_IMAGE_VERSION
)
from discovery import (
    DeviceInstance, acquire_base_handle, ensure_module_loaded, list_instances
)
from knobs import Knobs
from log_config import get_logger, log_skip
from results import (
    DetailClass, Outcome, classify_detail_code, fold_outcomes, parse_detail_code
)
from topology import CpuInfo

logger = get_logger(__name__)


class InitStatus(enum.Enum):
    SUCCESS = "success"
    SKIP = "skip"
    FATAL = "fatal"


@dataclass(frozen=True)
class SelfTestSession:
    """Image selected for this scan session; used only for diagnostics."""
    image_id: str
    image_version: str = UNKNOWN_IMAGE_VERSION


def _read_image_version(base: str) -> str:
    try:
        version = conf.read_value(base, IMAGE_VERSION_FILE)
    except OSError:
        return UNKNOWN_IMAGE_VERSION
    return version or UNKNOWN_IMAGE_VERSION


def init_scan(knobs: Knobs = Knobs(),
              misc_base: str = IFS_MISC_BASE_PATH,
              loader: typing.Optional[typing.Callable[[], bool]] = None,
              ) -> typing.Tuple[InitStatus, typing.Optional[SelfTestSession]]:
    """Prepares a scan session.

    Loads the driver if needed, checks that the control files are writable,
    then selects and persists the next test image.

    Args:
        knobs: Overrides for image selection.
        misc_base: Directory containing the intel_ifs_<N> instances.
        loader: Callable that tries to load the driver; modprobe by default.

    Returns:
        (status, session). session is None unless status is SUCCESS.
    """
    base = acquire_base_handle(misc_base, loader or ensure_module_loaded)
    if base is None:
        logger.error("IFS driver not available under %s", misc_base)
        return InitStatus.FATAL, None

    # See if we can open run_test and current_batch for writing
    for name, flags in ((RUN_TEST_FILE, os.O_WRONLY), (CURRENT_BATCH_FILE, os.O_RDWR)):
        try:
            conf.check_access(base, name, flags)
        except OSError as e:
            logger.error("Could not open %s/%s for writing (not running as root?): %s",
                         os.path.basename(base), name, e.strerror or e)
            return InitStatus.FATAL, None

    try:
        image_id, proceed = select_next_image(base, knobs)
    except OSError as e:
        logger.error("Could not read batch state from %s: %s", base, e)
        return InitStatus.FATAL, None

    if not proceed:
        log_skip(logger, "cannot load test file")
        return InitStatus.SKIP, None

    session = SelfTestSession(image_id, _read_image_version(base))
    logger.info("Test image ID: %s version: %s", session.image_id, session.image_version)
    return InitStatus.SUCCESS, session


def _run_instance(instance: DeviceInstance, cpu: CpuInfo,
                  session: SelfTestSession) -> typing.Optional[Outcome]:
    """Triggers the test on one instance and interprets its result.

    Returns:
        Outcome for this instance, or None when there is nothing to record
        (I/O error, soft failure or unrecognized status).
    """
    if not os.access(instance.path, os.X_OK):
        logger.warning('Could not start test for "%s": directory not accessible', instance.name)
        return None

    # Start the test; this blocks until the test has finished
    try:
        conf.write_value(instance.path, RUN_TEST_FILE, f"{cpu.cpu_number}\n")
    except (OSError, ValueError) as e:
        logger.warning('Could not start test for "%s": %s', instance.name, e)
        return None

    try:
        result = conf.read_value(instance.path, STATUS_FILE)
    except OSError as e:
        logger.warning('Could not obtain result for "%s": %s', instance.name, e)
        return None

    if result.startswith(STATUS_FAIL):
        try:
            details = conf.read_value(instance.path, DETAILS_FILE)
        except OSError:
            logger.error('Test "%s" failed but could not retrieve error condition. '
                         'Image ID: %s version: %s',
                         instance.name, session.image_id, session.image_version)
            return Outcome.fail(f"{instance.name}: unknown error condition")

        code = parse_detail_code(details)
        if code is not None and classify_detail_code(code) is DetailClass.SOFT:
            logger.warning('Test "%s" did not run to completion, code: %s '
                           'image ID: %s version: %s',
                           instance.name, details, session.image_id, session.image_version)
            return None

        logger.error('Test "%s" failed with condition: %s image: %s version: %s',
                     instance.name, details, session.image_id, session.image_version)
        return Outcome.fail(f"{instance.name}: {details}")

    if result.startswith(STATUS_PASS):
        logger.debug('Test "%s" passed', instance.name)
        return Outcome.success()

    return None


def run_on_core(cpu: CpuInfo, session: SelfTestSession,
                misc_base: str = IFS_MISC_BASE_PATH) -> Outcome:
    """Runs the scan for one logical CPU on every IFS instance.

    Only thread 0 of each core triggers the test. The first hard failure
    stops the walk; later instances are not triggered.

    Returns:
        Fail on a hard failure, Success if any instance passed, else Skip.
    """
    if not cpu.is_primary_thread:
        log_skip(logger, "Test should run only on thread 0 on every core")
        return Outcome.skip("not primary thread")

    try:
        instances = list_instances(misc_base)
    except OSError as e:
        logger.error("Could not list IFS instances under %s: %s", misc_base, e)
        return Outcome.skip("control directory unavailable")

    outcomes = (_run_instance(instance, cpu, session) for instance in instances)
    return fold_outcomes((o for o in outcomes if o is not None),
                         skip_reason="no IFS instance passed")
