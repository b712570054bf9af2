# main.py
"""CLI entry point for driving the IFS (In-Field Scan) self-test."""

import argparse
import os
import sys
import typing

import configuration as conf
import topology
from config_file import (
    IFS_MISC_BASE_PATH, CPU_SYSFS_PATH, STATUS_FILE, DETAILS_FILE,
    CURRENT_BATCH_FILE, IMAGE_VERSION_FILE, EXIT_SUCCESS_CODE, EXIT_FAIL_CODE,
    EXIT_SKIP_CODE
)
from discovery import list_instances
from knobs import KnobError, Knobs, parse_knob_options
from log_config import get_logger, setup_logging
from results import Outcome, OutcomeKind, fold_outcomes
from scan import InitStatus, init_scan, run_on_core

logger = get_logger(__name__)

OUTCOME_EXIT_CODES = {
    OutcomeKind.SUCCESS: EXIT_SUCCESS_CODE,
    OutcomeKind.SKIP: EXIT_SKIP_CODE,
    OutcomeKind.FAIL: EXIT_FAIL_CODE,
}
INIT_EXIT_CODES = {
    InitStatus.SUCCESS: EXIT_SUCCESS_CODE,
    InitStatus.SKIP: EXIT_SKIP_CODE,
    InitStatus.FATAL: EXIT_FAIL_CODE,
}


def display_menu():
    """Prints the main menu options."""
    print("\n--- IFS Self-Test CLI ---")
    print("1. View Current IFS State")
    print("2. Select Next Test Image")
    print("3. Run Scan on All CPUs")
    print("4. Exit")
    print("-------------------------")


def view_state(misc_base: str) -> int:
    """Retrieves and prints the control values of every IFS instance."""
    try:
        instances = list_instances(misc_base)
    except OSError as e:
        print(f"Error listing {misc_base}: {e}")
        return EXIT_FAIL_CODE

    if not instances:
        print(f"No IFS instances found under {misc_base} (is intel_ifs loaded?)")
        return EXIT_SKIP_CODE

    for instance in instances:
        print(f"\n--- {instance.name} ---")
        for label, name in (("Status", STATUS_FILE), ("Details", DETAILS_FILE),
                            ("Current Batch", CURRENT_BATCH_FILE),
                            ("Image Version", IMAGE_VERSION_FILE)):
            value = conf.get_config_value(instance.path, name)
            print(f"{label:<14}: {value if value is not None else 'Error reading'}")
    return EXIT_SUCCESS_CODE


def _pin_to_cpu(cpu_number: int) -> None:
    if hasattr(os, "sched_setaffinity"):
        try:
            os.sched_setaffinity(0, {cpu_number})
        except OSError as e:
            logger.warning("Could not pin to CPU %d: %s", cpu_number, e)


def run_scan(knobs: Knobs, misc_base: str, cpus: typing.Optional[typing.List[int]],
             cpu_sysfs: str = CPU_SYSFS_PATH) -> Outcome:
    """Initializes a session and runs it on each CPU in turn."""
    status, session = init_scan(knobs, misc_base)
    if status is InitStatus.FATAL:
        return Outcome.fail("initialization failed")
    if session is None:
        return Outcome.skip("cannot load test file")

    if cpus is None:
        cpus = topology.online_cpus(cpu_sysfs)

    original_affinity = os.sched_getaffinity(0) if hasattr(os, "sched_getaffinity") else None

    def per_cpu():
        for cpu_number in cpus:
            cpu = topology.read_cpu_info(cpu_number, cpu_sysfs)
            _pin_to_cpu(cpu_number)
            outcome = run_on_core(cpu, session, misc_base)
            logger.info("CPU %d: %s %s", cpu_number, outcome.kind.value, outcome.reason)
            yield outcome

    try:
        return fold_outcomes(per_cpu(), skip_reason="no CPU ran the test")
    finally:
        if original_affinity is not None:
            os.sched_setaffinity(0, original_affinity)


def run_cli(misc_base: str = IFS_MISC_BASE_PATH, cpu_sysfs: str = CPU_SYSFS_PATH):
    """Runs the main interactive command-line interface loop."""
    while True:
        display_menu()
        choice = input("Enter choice: ")

        if choice == '1':
            view_state(misc_base)
        elif choice == '2':
            status, session = init_scan(misc_base=misc_base)
            if session is not None:
                print(f"Selected image {session.image_id} (version {session.image_version})")
            else:
                print(f"Image selection result: {status.value}")
        elif choice == '3':
            try:
                outcome = run_scan(Knobs(), misc_base, None, cpu_sysfs)
            except (OSError, ValueError) as e:
                print(f"Could not enumerate CPUs: {e}")
                continue
            print(f">>> Scan {outcome.kind.value.upper()} <<< {outcome.reason}")
        elif choice == '4':
            print("Exiting.")
            break
        else:
            print("Invalid choice, please try again.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ifs-selftest",
        description="Drive the kernel In-Field Scan hardware self-test.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--base", default=IFS_MISC_BASE_PATH,
                   help="Directory holding the intel_ifs_<N> instances")
    sp = p.add_subparsers(dest="command")

    sp.add_parser("status", help="Show the control values of every IFS instance")

    init_p = sp.add_parser("init", help="Select and persist the next test image")
    init_p.add_argument("-O", "--option", action="append", default=[], metavar="KEY=VALUE",
                        help="Test knob (test_file=<id>, enforce_run=1)")

    run_p = sp.add_parser("run", help="Select an image and run the scan")
    run_p.add_argument("-O", "--option", action="append", default=[], metavar="KEY=VALUE",
                       help="Test knob (test_file=<id>, enforce_run=1)")
    run_p.add_argument("--cpu", type=int, action="append", dest="cpus",
                       help="Logical CPU to test (repeatable, default: all online)")
    run_p.add_argument("--cpu-sysfs", default=CPU_SYSFS_PATH, help=argparse.SUPPRESS)

    return p


def main(argv: typing.Optional[typing.List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    # Basic check for root/sudo, as sysfs writes require it
    if args.command != "status" and os.geteuid() != 0:
        logger.warning("Running without root privileges; selecting an image or "
                       "running the scan will likely fail due to permissions.")

    if args.command is None:
        run_cli(args.base)
        return EXIT_SUCCESS_CODE
    if args.command == "status":
        return view_state(args.base)

    try:
        knobs = parse_knob_options(args.option)
    except KnobError as e:
        parser.error(str(e))

    if args.command == "init":
        status, _session = init_scan(knobs, args.base)
        return INIT_EXIT_CODES[status]

    try:
        outcome = run_scan(knobs, args.base, args.cpus, args.cpu_sysfs)
    except (OSError, ValueError) as e:
        logger.error("Could not enumerate CPUs: %s", e)
        return EXIT_FAIL_CODE
    print(f">>> Scan {outcome.kind.value.upper()} <<< {outcome.reason}")
    return OUTCOME_EXIT_CODES[outcome.kind]


if __name__ == "__main__":
    sys.exit(main())
