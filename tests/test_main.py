import logging

import pytest

import main
import scan


@pytest.fixture(autouse=True)
def isolate(monkeypatch):
    monkeypatch.setattr(scan, "ensure_module_loaded", lambda: False)
    yield
    logger = logging.getLogger("ifs")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


def _run(fake_ifs, fake_cpus, *args):
    return main.main(["--base", str(fake_ifs.root), "run",
                      "--cpu-sysfs", str(fake_cpus), *args])


def test_status_prints_instances(fake_ifs, capsys):
    fake_ifs.add_instance(0, status="pass", current_batch="0x2", image_version="0x3b")
    assert main.main(["--base", str(fake_ifs.root), "status"]) == 0
    out = capsys.readouterr().out
    assert "intel_ifs_0" in out
    assert "Current Batch : 0x2" in out
    assert "Image Version : 0x3b" in out


def test_status_without_instances(fake_ifs):
    assert main.main(["--base", str(fake_ifs.root), "status"]) == 2


def test_init_exit_codes(fake_ifs):
    base = str(fake_ifs.root)
    assert main.main(["--base", base, "init"]) == 1
    fake_ifs.add_instance(0, status="fail", current_batch="0x3")
    assert main.main(["--base", base, "init"]) == 2
    assert main.main(["--base", base, "init", "-O", "enforce_run=1", "-O", "test_file=0x9"]) == 0
    assert fake_ifs.read(0, "current_batch") == "0x9"


def test_bad_knob_is_usage_error(fake_ifs):
    with pytest.raises(SystemExit) as excinfo:
        main.main(["--base", str(fake_ifs.root), "init", "-O", "nope=1"])
    assert excinfo.value.code == 2


def test_run_on_all_online_cpus(fake_ifs, fake_cpus, capsys):
    fake_ifs.add_instance(0, status="pass")
    assert _run(fake_ifs, fake_cpus) == 0
    assert "SUCCESS" in capsys.readouterr().out
    # cpu2 and cpu3 are secondary threads; only cpu0 and cpu1 trigger
    assert fake_ifs.read(0, "run_test") == "1\n"


def test_run_secondary_thread_only_skips(fake_ifs, fake_cpus):
    fake_ifs.add_instance(0, status="pass")
    assert _run(fake_ifs, fake_cpus, "--cpu", "2") == 2
    assert fake_ifs.read(0, "run_test") == ""


def test_run_hard_failure(fake_ifs, fake_cpus):
    fake_ifs.add_instance(0, status="fail", details="0x1")
    assert _run(fake_ifs, fake_cpus, "-O", "enforce_run=1", "--cpu", "0") == 1


def test_run_init_fatal(fake_ifs, fake_cpus):
    assert _run(fake_ifs, fake_cpus, "--cpu", "0") == 1


def test_interactive_exit(fake_ifs, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "4")
    assert main.main(["--base", str(fake_ifs.root)]) == 0
    assert "Exiting." in capsys.readouterr().out


def test_interactive_scan_survives_unreadable_cpu_list(fake_ifs, tmp_path, monkeypatch, capsys):
    fake_ifs.add_instance(0, status="pass")
    choices = iter(["3", "4"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(choices))
    main.run_cli(str(fake_ifs.root), cpu_sysfs=str(tmp_path / "no-cpu-sysfs"))
    out = capsys.readouterr().out
    assert "Could not enumerate CPUs" in out
    assert "Exiting." in out
