"""
Tests for settings, validation and state persistence.
"""
import json

import pytest

from jellyfin_lxc.errors import InvalidInput
from jellyfin_lxc.install_config import PASSWORD_ENV, InstallConfig, load_config_file
from jellyfin_lxc.state_store import ensure_defaults, load_state, merge_config, save_state


def test_defaults_match_original_layout():
    cfg = InstallConfig(ensure_defaults({})["config"])
    assert cfg.ct_id == 111
    assert cfg.hostname == "jellyfin"
    assert cfg.usb_device == "/dev/sdb1"
    assert cfg.usb_mount == "/mnt/bjorne"
    assert cfg.media_path == "/media/bjorne"
    assert cfg.template == "debian-12-standard_12.7-1_amd64.tar.zst"
    assert (cfg.cores, cfg.memory_mb, cfg.disk_gb) == (2, 4096, 32)
    assert not cfg.dry_run


@pytest.mark.parametrize("ct_id", [99, 0, -1])
def test_container_id_below_100_rejected(ct_id):
    with pytest.raises(InvalidInput):
        InstallConfig({"ct_id": ct_id, "password": "hunter22"}).validate()


def test_non_numeric_container_id_rejected():
    with pytest.raises(InvalidInput):
        InstallConfig({"ct_id": "abc", "password": "hunter22"}).validate()


def test_short_password_rejected(monkeypatch):
    monkeypatch.delenv(PASSWORD_ENV, raising=False)
    with pytest.raises(InvalidInput):
        InstallConfig({"password": "12345"}).validate()


def test_password_from_environment(monkeypatch):
    monkeypatch.setenv(PASSWORD_ENV, "from-env-secret")
    cfg = InstallConfig({})
    assert cfg.password == "from-env-secret"
    cfg.validate()


def test_relative_mount_rejected():
    with pytest.raises(InvalidInput):
        InstallConfig({"password": "hunter22", "usb_mount": "mnt/bjorne"}).validate()


def test_load_yaml_config(tmp_path):
    p = tmp_path / "jellyfin.yaml"
    p.write_text("ct_id: 205\nusb_device: /dev/sdc1\nmemory_mb: 8192\n")
    raw = load_config_file(str(p))
    cfg = InstallConfig(merge_config(ensure_defaults({}), raw)["config"])
    assert (cfg.ct_id, cfg.usb_device, cfg.memory_mb) == (205, "/dev/sdc1", 8192)


def test_unknown_config_key_rejected(tmp_path):
    p = tmp_path / "jellyfin.yaml"
    p.write_text("ctid: 205\n")
    with pytest.raises(InvalidInput):
        load_config_file(str(p))


def test_merge_ignores_none():
    state = merge_config(ensure_defaults({}), {"ct_id": None, "usb_mount": "/mnt/x"})
    assert state["config"]["ct_id"] == 111
    assert state["config"]["usb_mount"] == "/mnt/x"


@pytest.mark.parametrize("name", ["state.json", "state.yaml"])
def test_state_roundtrip_never_stores_password(tmp_path, name):
    path = tmp_path / name
    state = ensure_defaults({"config": {"password": "hunter22"}})
    state["execution"]["completed_steps"].append("10_preflight")
    save_state(str(path), state)

    assert "hunter22" not in path.read_text()
    loaded = load_state(str(path))
    assert loaded["execution"]["completed_steps"] == ["10_preflight"]
    assert "password" not in loaded["config"]
    assert state["config"]["password"] == "hunter22"


def test_state_must_be_mapping(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps([1, 2]))
    with pytest.raises(ValueError):
        load_state(str(path))


def test_missing_state_is_empty(tmp_path):
    assert load_state(str(tmp_path / "nope.json")) == {}
