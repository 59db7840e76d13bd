"""
Unit tests for BondingSysfs and NetifSysfs.

The fake sysfs tree is plain files, so a write replaces the file content;
assertions check the last line written.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from netorch.config import SysfsConfig
from netorch.systems.sysfs.bonding import BondingSysfs, NetifSysfs


@pytest.fixture
def root(tmp_path: Path) -> Path:
    bonding = tmp_path / "bond0" / "bonding"
    bonding.mkdir(parents=True)
    (tmp_path / "bonding_masters").write_text("bond0\n")
    (bonding / "slaves").write_text("eth0 eth1\n")
    (bonding / "arp_ip_target").write_text("192.0.2.1\n")
    (bonding / "mode").write_text("balance-rr 0\n")
    (tmp_path / "eth0").mkdir()
    (tmp_path / "eth0" / "mtu").write_text("1500\n")
    (tmp_path / "eth0" / "address").write_text("52:54:00:12:34:56\n")
    return tmp_path


@pytest.fixture
def bonding(root: Path) -> BondingSysfs:
    return BondingSysfs.from_config(SysfsConfig(root=str(root)))


def test_available_and_masters(bonding, root):
    assert bonding.available()
    assert bonding.get_masters() == ["bond0"]
    assert bonding.is_master("bond0")
    assert not bonding.is_master("eth0")


def test_not_available_without_driver(tmp_path):
    assert not BondingSysfs.from_config(SysfsConfig(root=str(tmp_path))).available()


def test_master_add_delete(bonding, root):
    bonding.add_master("bond1")
    assert (root / "bonding_masters").read_text() == "+bond1\n"
    bonding.delete_master("bond0")
    assert (root / "bonding_masters").read_text() == "-bond0\n"


def test_slaves_and_arp_targets(bonding, root):
    assert bonding.get_slaves("bond0") == ["eth0", "eth1"]
    assert bonding.get_arp_targets("bond0") == ["192.0.2.1"]

    bonding.add_slave("bond0", "eth2")
    assert (root / "bond0" / "bonding" / "slaves").read_text() == "+eth2\n"
    bonding.delete_arp_target("bond0", "192.0.2.1")
    assert (root / "bond0" / "bonding" / "arp_ip_target").read_text() == "-192.0.2.1\n"


def test_get_and_set_attr(bonding, root):
    assert bonding.get_attr("bond0", "mode") == "balance-rr 0"
    bonding.set_attr("bond0", "miimon", "100")
    assert (root / "bond0" / "bonding" / "miimon").read_text() == "100"


def test_set_list_attr_unchanged_does_not_write(bonding, root):
    result = bonding.set_list_attr("bond0", "slaves", ["eth1", "eth0"])
    assert result.success
    assert result.applied == []
    assert (root / "bond0" / "bonding" / "slaves").read_text() == "eth0 eth1\n"


def test_set_list_attr_applies_last_write(bonding, root):
    result = bonding.set_list_attr("bond0", "arp_ip_target", ["192.0.2.2"])
    assert result.success
    assert [(op.kind.value, op.value) for op in result.applied] == [
        ("remove", "192.0.2.1"),
        ("add", "192.0.2.2"),
    ]
    assert (root / "bond0" / "bonding" / "arp_ip_target").read_text() == "+192.0.2.2\n"


def test_set_list_attr_missing_attribute_fails(bonding):
    result = bonding.set_list_attr("bond7", "slaves", ["eth0"])
    assert not result.success
    assert result.key == "bond7/bonding/slaves"


def test_netif_attributes(root):
    netif = NetifSysfs.from_config(SysfsConfig(root=str(root)))
    assert netif.get_int("eth0", "mtu") == 1500
    assert netif.get_string("eth0", "address") == "52:54:00:12:34:56"
