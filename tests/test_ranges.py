from ipaddress import ip_network

import pytest

from poolconfig.errors import ConsistencyError
from poolconfig.ranges import RangeTracker


def test_admit_disjoint_blocks():
    tracker = RangeTracker()
    tracker.admit(ip_network("10.0.0.0/24"), "a")
    tracker.admit(ip_network("10.0.1.0/24"), "a")
    tracker.admit(ip_network("192.168.0.0/16"), "b")
    assert len(tracker) == 3


def test_duplicate_block_rejected():
    tracker = RangeTracker()
    tracker.admit(ip_network("10.0.0.0/8"), "pool1")
    with pytest.raises(ConsistencyError, match="duplicate"):
        tracker.admit(ip_network("10.0.0.0/8"), "pool2")


@pytest.mark.parametrize(
    "first, second",
    [
        ("10.0.0.0/8", "10.0.0.0/16"),
        ("10.0.0.0/16", "10.0.0.0/8"),
        ("10.0.0.0/24", "10.0.0.255/32"),
        ("2001:db8::/32", "2001:db8:1::/48"),
    ],
)
def test_overlapping_block_rejected(first, second):
    tracker = RangeTracker()
    tracker.admit(ip_network(first), "pool1")
    with pytest.raises(ConsistencyError, match="overlaps"):
        tracker.admit(ip_network(second), "pool2")


def test_rejected_block_is_not_admitted():
    tracker = RangeTracker()
    tracker.admit(ip_network("10.0.0.0/8"), "pool1")
    with pytest.raises(ConsistencyError):
        tracker.admit(ip_network("10.1.0.0/16"), "pool2")
    assert len(tracker) == 1


def test_error_cites_first_admitted_block():
    tracker = RangeTracker()
    tracker.admit(ip_network("10.0.0.0/24"), "pool1")
    tracker.admit(ip_network("10.0.1.0/24"), "pool2")
    with pytest.raises(ConsistencyError, match='10.0.0.0/24 in pool "pool1"'):
        tracker.admit(ip_network("10.0.0.0/16"), "pool3")


def test_families_do_not_overlap():
    tracker = RangeTracker()
    tracker.admit(ip_network("0.0.0.0/0"), "v4")
    tracker.admit(ip_network("::/0"), "v6")
    assert len(tracker) == 2
