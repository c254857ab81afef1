"""
Unit tests for ordered entry list editing.
"""

import pytest

from app.core.exceptions import EntryIndexError
from app.services.wizard import entry_lists
from app.services.wizard.form_state import Contact, FundingRound, Investor


@pytest.fixture
def contacts():
    return [Contact(contact_value="a"), Contact(contact_value="b"), Contact(contact_value="c")]


def test_append_returns_new_list(contacts):
    updated = entry_lists.append_entry(contacts, Contact(contact_value="d"))
    assert [c.contact_value for c in updated] == ["a", "b", "c", "d"]
    assert len(contacts) == 3


def test_remove_shifts_later_entries(contacts):
    updated = entry_lists.remove_entry(contacts, 1)
    assert [c.contact_value for c in updated] == ["a", "c"]


def test_remove_last_entry_leaves_empty_list():
    assert entry_lists.remove_entry([Contact()], 0) == []


@pytest.mark.parametrize("index", [-1, 3])
def test_out_of_range_index(contacts, index):
    with pytest.raises(EntryIndexError):
        entry_lists.remove_entry(contacts, index)
    with pytest.raises(EntryIndexError):
        entry_lists.patch_entry(contacts, index, "contact_value", "x")


def test_patch_does_not_mutate_input(contacts):
    updated = entry_lists.patch_entry(contacts, 0, "contact_value", "z")
    assert updated[0].contact_value == "z"
    assert contacts[0].contact_value == "a"
    assert updated[1] is contacts[1]


def test_investor_sub_list():
    funding_round = FundingRound(round_type="SEED")
    with_two = entry_lists.add_investor(entry_lists.add_investor(funding_round), Investor(name="Accel"))
    assert len(with_two.investors) == 2
    assert with_two.investors[0].investor_type == "VENTURE_CAPITAL"

    patched = entry_lists.patch_investor(with_two, 0, "is_lead_investor", True)
    assert patched.investors[0].is_lead_investor is True
    assert with_two.investors[0].is_lead_investor is False

    removed = entry_lists.remove_investor(patched, 0)
    assert [i.name for i in removed.investors] == ["Accel"]
    assert funding_round.investors == []

    with pytest.raises(EntryIndexError):
        entry_lists.remove_investor(removed, 1)
