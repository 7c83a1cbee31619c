"""Tests for identity parsing."""

import pytest

from cruxconnect import CruxId, InvalidIdentity


def test_from_string_splits_components():
    crux_id = CruxId.from_string("foo123@cruxdev.crux")
    assert crux_id.subdomain == "foo123"
    assert crux_id.domain == "cruxdev.crux"
    assert crux_id.components.subdomain == "foo123"
    assert str(crux_id) == "foo123@cruxdev.crux"


def test_canonical_form_equality_and_hashing():
    a = CruxId.from_string("  Foo@Wallet.NS ")
    b = CruxId.from_string("foo@wallet.ns")
    assert a == b
    assert str(a) == "foo@wallet.ns"
    assert len({a, b}) == 1


def test_identity_is_immutable():
    crux_id = CruxId.from_string("foo@wallet.ns")
    with pytest.raises(Exception):
        crux_id.subdomain = "bar"


@pytest.mark.parametrize(
    "value",
    ["foo", "foo@", "@wallet.ns", "foo@bar@wallet.ns", "1foo@wallet.ns", "fo o@wallet.ns", "foo@wallet..ns"],
)
def test_invalid_identities_rejected(value):
    with pytest.raises(InvalidIdentity):
        CruxId.from_string(value)


def test_coerce_accepts_strings_and_instances():
    crux_id = CruxId.from_string("bar@wallet.ns")
    assert CruxId.coerce(crux_id) is crux_id
    assert CruxId.coerce("bar@wallet.ns") == crux_id
