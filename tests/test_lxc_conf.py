"""
Tests for container bind-mount declarations.
"""
import pytest

from jellyfin_lxc.errors import ContainerError
from jellyfin_lxc.lib.lxc_conf import BindMount, add_bind_mount, conf_path_for, parse_bind_mounts


@pytest.fixture
def conf(tmp_path):
    p = tmp_path / "111.conf"
    p.write_text("arch: amd64\nhostname: jellyfin\nunprivileged: 1\n")
    return p


def test_first_mount_is_mp0(conf):
    bm = add_bind_mount(conf, "/mnt/bjorne", "/media/bjorne")
    assert bm == BindMount(0, "/mnt/bjorne", "/media/bjorne")
    assert conf.read_text().splitlines()[-1] == "mp0: /mnt/bjorne,mp=/media/bjorne,backup=0"


def test_rerun_does_not_duplicate(conf):
    add_bind_mount(conf, "/mnt/bjorne", "/media/bjorne")
    again = add_bind_mount(conf, "/mnt/bjorne", "/media/bjorne")
    assert again.index == 0
    assert conf.read_text().count("mp=/media/bjorne") == 1


def test_picks_lowest_free_slot(conf):
    conf.write_text(conf.read_text() + "mp0: /srv/a,mp=/a\nmp2: /srv/c,mp=/c,backup=0\n")
    bm = add_bind_mount(conf, "/mnt/bjorne", "/media/bjorne")
    assert bm.index == 1
    assert [m.index for m in parse_bind_mounts(conf.read_text().splitlines())] == [0, 2, 1]


def test_missing_trailing_newline(conf):
    conf.write_text("arch: amd64")
    add_bind_mount(conf, "/mnt/bjorne", "/media/bjorne")
    assert conf.read_text() == "arch: amd64\nmp0: /mnt/bjorne,mp=/media/bjorne,backup=0\n"


def test_snapshot_sections_are_ignored_and_refused(conf):
    conf.write_text(conf.read_text() + "\n[before-upgrade]\nmp0: /old,mp=/old\n")
    assert parse_bind_mounts(conf.read_text().splitlines()) == []
    with pytest.raises(ContainerError):
        add_bind_mount(conf, "/mnt/bjorne", "/media/bjorne")


def test_missing_config_is_an_error(tmp_path):
    with pytest.raises(ContainerError):
        add_bind_mount(tmp_path / "999.conf", "/mnt/bjorne", "/media/bjorne")


def test_dry_run_leaves_file_alone(conf):
    before = conf.read_text()
    bm = add_bind_mount(conf, "/mnt/bjorne", "/media/bjorne", dry_run=True)
    assert bm.index == 0
    assert conf.read_text() == before


def test_conf_path_for():
    assert str(conf_path_for(111)) == "/etc/pve/lxc/111.conf"
