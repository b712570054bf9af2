# tests/conftest.py
import pytest


class FakeIfs:
    """A fake /sys/devices/virtual/misc tree with intel_ifs_<N> instances."""

    def __init__(self, root):
        self.root = root

    def add_instance(self, index, status="untested", details="0x0",
                     current_batch="none", image_version="0x3b"):
        inst = self.root / f"intel_ifs_{index}"
        inst.mkdir()
        (inst / "status").write_text(status + "\n")
        (inst / "details").write_text(details + "\n")
        (inst / "current_batch").write_text(current_batch + "\n")
        (inst / "run_test").write_text("")
        if image_version is not None:
            (inst / "image_version").write_text(image_version + "\n")
        return inst

    def read(self, index, name):
        return (self.root / f"intel_ifs_{index}" / name).read_text()

    @property
    def primary(self):
        return str(self.root / "intel_ifs_0")


@pytest.fixture
def fake_ifs(tmp_path):
    root = tmp_path / "misc"
    root.mkdir()
    return FakeIfs(root)


@pytest.fixture
def fake_cpus(tmp_path):
    """Two cores with two threads each: cpu0/cpu2 on core 0, cpu1/cpu3 on core 1."""
    root = tmp_path / "cpu"
    root.mkdir()
    (root / "online").write_text("0-3\n")
    siblings = {0: "0,2", 1: "1,3", 2: "0,2", 3: "1,3"}
    for cpu, sibling_list in siblings.items():
        topo = root / f"cpu{cpu}" / "topology"
        topo.mkdir(parents=True)
        (topo / "core_id").write_text(f"{cpu % 2}\n")
        (topo / "thread_siblings_list").write_text(sibling_list + "\n")
    return root
