# batch_state.py
"""Chooses and persists the next IFS test image (batch).

The kernel keeps a pointer to the current image in `current_batch`. Each
scan session advances it by one, so successive sessions walk through every
image installed under /lib/firmware. Writing an id that has no image behind
it fails with ENOENT, which is treated as the end of the sequence: the
pointer wraps back to DEFAULT_TEST_ID. A status of "untested" means the
previous session never got a verdict, so the same image is retried.
"""

import string
import typing
from dataclasses import dataclass

import configuration as conf
from config_file import (
    STATUS_FILE, CURRENT_BATCH_FILE, STATUS_FAIL, STATUS_UNTESTED,
    BATCH_NONE, DEFAULT_TEST_ID, IMAGE_ID_MAX
)
from knobs import Knobs
from log_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TestImageState:
    """Persisted batch pointer and outcome of the last run."""
    current_batch: str
    status: str

    @property
    def previous_failed(self) -> bool:
        return self.status.startswith(STATUS_FAIL)

    @property
    def untested(self) -> bool:
        return self.status.startswith(STATUS_UNTESTED)

    @property
    def has_batch(self) -> bool:
        return not self.current_batch.startswith(BATCH_NONE)


def format_image_id(image_id: int) -> str:
    return f"0x{image_id:x}"


def parse_image_id(text: str) -> typing.Optional[int]:
    """Parses a decimal or 0x-prefixed id; None on parse or range error.

    Leading zeros are decimal ("010" is ten), as strtoul reads them.
    """
    text = text.strip()
    if text[:2].lower() == "0x":
        digits, base, allowed = text[2:], 16, string.hexdigits
    else:
        digits, base, allowed = text, 10, string.digits
    if not digits or any(c not in allowed for c in digits):
        return None
    value = int(digits, base)
    if value > IMAGE_ID_MAX:
        return None
    return value


def read_image_state(base: str) -> TestImageState:
    """Reads status and current_batch from the primary instance.

    Raises:
        OSError: Either endpoint could not be read.
    """
    status = conf.read_value(base, STATUS_FILE)
    current_batch = conf.read_value(base, CURRENT_BATCH_FILE)
    return TestImageState(current_batch=current_batch, status=status)


def _persist(base: str, image_id: str) -> None:
    conf.write_value(base, CURRENT_BATCH_FILE, image_id)


def select_next_image(base: str, knobs: Knobs) -> typing.Tuple[str, bool]:
    """Selects the next test image and writes it to current_batch.

    Args:
        base: Path of the primary instance directory.
        knobs: Explicit image override and enforce-run flag.

    Returns:
        (image_id, proceed). image_id is the id persisted, or the one that
        was attempted when selection is refused.

    Raises:
        OSError: The current state could not be read.
    """
    state = read_image_state(base)

    if state.previous_failed and not knobs.enforce_run:
        logger.warning("Previous run failure found! Refusing to run")
        return state.current_batch, False

    if knobs.test_file is not None:
        next_id = knobs.test_file
    elif not state.has_batch:
        next_id = DEFAULT_TEST_ID
    else:
        current_id = parse_image_id(state.current_batch)
        if current_id is None:
            logger.info("Cannot parse current_batch value: %s", state.current_batch)
            return state.current_batch, False
        if state.untested:
            logger.info("Test file %s remains untested, so try again", state.current_batch)
            next_id = current_id
        else:
            next_id = current_id + 1

    image_id = format_image_id(next_id)
    try:
        _persist(base, image_id)
        return image_id, True
    except FileNotFoundError:
        pass
    except (OSError, ValueError) as e:
        logger.warning("Could not select test file %s: %s", image_id, e)
        return image_id, False

    default_id = format_image_id(DEFAULT_TEST_ID)
    logger.info("Test file %s, does not exist. Starting over from %s", image_id, default_id)
    try:
        _persist(base, default_id)
    except (OSError, ValueError) as e:
        logger.warning("Could not select test file %s: %s", default_id, e)
        return default_id, False
    return default_id, True
