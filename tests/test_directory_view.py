"""
Tests for the directory view model
"""

import asyncio
from datetime import datetime

import pytest

from guest_directory.schemas.guest import Guest
from guest_directory.services.directory_view import DirectoryFilters, DirectoryView, ViewState

def make_guest(guest_id, first_name, last_name, relationship="P", confirmed=False, family_group=None, phone=None):
    return Guest(
        id=guest_id,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        relationship=relationship,
        confirmed=confirmed,
        family_group=family_group,
        created_at=datetime(2026, 1, 1),
        updated_at=datetime(2026, 1, 1),
    )

@pytest.fixture
def guests():
    """A small guest list across both sides"""
    return [
        make_guest(1, "Ana", "Lima", "R", confirmed=True, family_group=5, phone="11999999999"),
        make_guest(2, "Bruno", "Lima", "R", family_group=5),
        make_guest(3, "Carla", "Souza", "P", confirmed=True, family_group=7, phone="43996070599"),
        make_guest(4, "Diego", "Alves", "P"),
    ]

@pytest.fixture
def view(guests):
    return DirectoryView(guests=guests)

def ids(guests):
    return [g.id for g in guests]

def test_search_by_full_name_case_insensitive(view):
    view.set_filters(search="a LIM")
    assert ids(view.visible()) == [1]

    view.set_filters(search="lima")
    assert ids(view.visible()) == [1, 2]

def test_search_by_phone_digits(view):
    """Formatted digits in the query match stored phone digits"""
    view.set_filters(search="(43) 99607")
    assert ids(view.visible()) == [3]

def test_search_without_digits_ignores_phone(view):
    view.set_filters(search="-")
    assert view.visible() == []

def test_name_query_with_digit_does_not_match_phone():
    """Digits inside a name query are not a phone search"""
    view = DirectoryView(guests=[
        make_guest(1, "Maria", "Silva", phone="11912345678"),
        make_guest(2, "Carlos", "Souza", phone="43996070599"),
    ])

    view.set_filters(search="Maria 2")
    assert view.visible() == []

    view.set_filters(search="+55 (11) 9123")
    assert ids(view.visible()) == []
    view.set_filters(search="(11) 9123")
    assert ids(view.visible()) == [1]

def test_clear_filters_resets_criteria_and_selection(view):
    view.set_filters(relationship="P")
    view.select(3)

    view.clear_filters()

    assert view.filters == DirectoryFilters()
    assert view.active_filter_count == 0
    assert view.selected_ids == frozenset()
    assert ids(view.visible()) == [1, 2, 3, 4]

def test_side_and_confirmation_filters_compose(view):
    view.set_filters(relationship="R")
    assert ids(view.visible()) == [1, 2]

    view.set_filters(confirmed=True)
    assert ids(view.visible()) == [1]

    view.set_filters(relationship=None, confirmed=False)
    assert ids(view.visible()) == [2, 4]
    assert view.active_filter_count == 1

def test_empty_filtered_differs_from_empty_collection(view):
    """No matches and no guests are different states"""
    assert view.state == ViewState.POPULATED

    view.set_filters(search="nobody")
    assert view.state == ViewState.EMPTY_FILTERED

    assert DirectoryView().state == ViewState.EMPTY_COLLECTION
    assert DirectoryView(filters=DirectoryFilters(search="nobody")).state == ViewState.EMPTY_COLLECTION

def test_family_members_exclude_edited_guest(view):
    """Editing guest 1 of group 5 lists only guest 2"""
    assert ids(view.family_members(5, exclude_id=1)) == [2]
    assert ids(view.family_members(5)) == [1, 2]
    assert view.family_members(99) == []
    assert view.family_members(None) == []

def test_family_groups_and_next_group(view):
    groups = view.family_groups()
    assert list(groups) == [5, 7]
    assert ids(groups[5]) == [1, 2]
    assert view.next_family_group() == 8
    assert DirectoryView().next_family_group() == 1

def test_selection_cleared_when_filters_change(view):
    """Selecting {1,2,3} then changing the search empties the selection"""
    for guest_id in (1, 2, 3):
        view.select(guest_id)
    assert view.selected_ids == {1, 2, 3}

    view.set_filters(search="a")
    assert view.selected_ids == frozenset()

def test_selection_kept_when_filters_unchanged(view):
    view.select(1)
    view.set_filters(search="")
    assert view.selected_ids == {1}

def test_selection_only_holds_visible_guests(view, guests):
    view.set_filters(relationship="R")
    view.select(3)
    assert view.selected_ids == frozenset()

    view.select(1)
    view.select(2)
    view.set_guests([g for g in guests if g.id != 2])
    assert view.selected_ids == {1}

def test_toggle_all(view):
    view.set_filters(relationship="P")
    view.toggle_all()
    assert view.selected_ids == {3, 4}
    assert view.all_selected

    view.toggle(4)
    assert view.some_selected
    view.toggle_all()
    assert view.all_selected
    view.toggle_all()
    assert view.selected_ids == frozenset()

def test_stats(view):
    stats = view.stats
    assert (stats.total, stats.confirmed, stats.pending) == (4, 2, 2)
    assert (stats.groom_side, stats.bride_side) == (2, 2)

def test_refresh_reads_from_service(directory, fake_api):
    """The view reads the cached collection through the service"""
    fake_api.add_guest(first_name="Ana", last_name="Lima", family_group=5)
    fake_api.add_guest(first_name="Rui", last_name="Costa", family_group=5)

    view = asyncio.run(DirectoryView().refresh(directory.guests))

    assert [g.full_name for g in view.visible()] == ["Ana Lima", "Rui Costa"]
    assert fake_api.write_count == 0
