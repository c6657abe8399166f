"""
Tests for unprivileged UID/GID remapping.
"""
import pytest

from jellyfin_lxc.errors import InvalidInput
from jellyfin_lxc.lib.idmap import UNPRIVILEGED_OFFSET, compute_host_ids, parse_id


def test_jellyfin_user_maps_into_host_range():
    ids = compute_host_ids(992, 992)
    assert (ids.host_uid, ids.host_gid) == (100992, 100992)
    assert ids.host_owner == "100992:100992"


@pytest.mark.parametrize("uid,gid", [(0, 0), (1, 65534), (999, 100), (65535, 65535)])
def test_offset_is_added_to_both_ids(uid, gid):
    ids = compute_host_ids(uid, gid)
    assert ids.host_uid == uid + UNPRIVILEGED_OFFSET
    assert ids.host_gid == gid + UNPRIVILEGED_OFFSET
    assert (ids.container_uid, ids.container_gid) == (uid, gid)


def test_custom_offset():
    assert compute_host_ids(5, 6, offset=200000).host_gid == 200006


@pytest.mark.parametrize("uid,gid", [(-1, 0), (0, -1), (-5, -5)])
def test_negative_ids_rejected(uid, gid):
    with pytest.raises(InvalidInput):
        compute_host_ids(uid, gid)


def test_non_integer_ids_rejected():
    with pytest.raises(InvalidInput):
        compute_host_ids("992", 992)
    with pytest.raises(InvalidInput):
        compute_host_ids(True, 0)


def test_parse_id():
    assert parse_id("992\n") == 992
    for bad in ("", "id: 'jellyfin': no such user", "-3"):
        with pytest.raises(InvalidInput):
            parse_id(bad)
