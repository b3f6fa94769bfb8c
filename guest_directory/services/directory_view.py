"""
Directory view model: filtered and aggregated projections of the guest list
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from guest_directory.schemas.guest import Guest, Relationship
from guest_directory.services.guest_service import GuestService

_NON_DIGITS = re.compile(r"\D")
# digits with the usual phone punctuation, no letters
_PHONE_QUERY = re.compile(r"[\d\s()+.-]+")


class ViewState(str, Enum):
    EMPTY_COLLECTION = "empty_collection"  # no guests at all
    EMPTY_FILTERED = "empty_filtered"  # guests exist, none match the filters
    POPULATED = "populated"


@dataclass(frozen=True)
class DirectoryFilters:
    search: str = ""
    relationship: Optional[Relationship] = None
    confirmed: Optional[bool] = None

    @property
    def active_count(self) -> int:
        """Number of dropdown filters in use (search is not counted)"""
        return (self.relationship is not None) + (self.confirmed is not None)

    def matches(self, guest: Guest) -> bool:
        if self.relationship is not None and guest.relationship != self.relationship:
            return False
        if self.confirmed is not None and guest.confirmed != self.confirmed:
            return False
        return self.matches_search(guest)

    def matches_search(self, guest: Guest) -> bool:
        query = self.search.strip()
        if not query:
            return True
        if query.lower() in guest.full_name.lower():
            return True
        if guest.phone is None or not _PHONE_QUERY.fullmatch(query):
            return False
        digits = _NON_DIGITS.sub("", query)
        return bool(digits) and digits in guest.phone


@dataclass(frozen=True)
class DirectoryStats:
    total: int = 0
    confirmed: int = 0
    pending: int = 0
    groom_side: int = 0
    bride_side: int = 0


@dataclass
class DirectoryView:
    """Projection over a guest list; never writes back to the cache.

    The selection set is reset whenever the filters change and is pruned of
    guests that drop out of view when the list is refreshed.
    """

    guests: List[Guest] = field(default_factory=list)
    filters: DirectoryFilters = field(default_factory=DirectoryFilters)
    _selected: Set[int] = field(default_factory=set, repr=False)

    async def refresh(self, service: GuestService) -> "DirectoryView":
        self.set_guests(await service.list_guests())
        return self

    def set_guests(self, guests: Iterable[Guest]) -> None:
        self.guests = list(guests)
        visible_ids = {g.id for g in self.visible()}
        self._selected &= visible_ids

    def set_filters(self, **changes) -> DirectoryFilters:
        """Replace some filter criteria; clears the selection if anything changed"""
        new_filters = replace(self.filters, **changes)
        if new_filters != self.filters:
            self.filters = new_filters
            self._selected.clear()
        return self.filters

    def clear_filters(self) -> DirectoryFilters:
        return self.set_filters(search="", relationship=None, confirmed=None)

    # -------- projections --------

    def visible(self) -> List[Guest]:
        return [g for g in self.guests if self.filters.matches(g)]

    @property
    def state(self) -> ViewState:
        if not self.guests:
            return ViewState.EMPTY_COLLECTION
        if not self.visible():
            return ViewState.EMPTY_FILTERED
        return ViewState.POPULATED

    @property
    def active_filter_count(self) -> int:
        return self.filters.active_count

    @property
    def stats(self) -> DirectoryStats:
        confirmed = sum(1 for g in self.guests if g.confirmed)
        return DirectoryStats(
            total=len(self.guests),
            confirmed=confirmed,
            pending=len(self.guests) - confirmed,
            groom_side=sum(1 for g in self.guests if g.relationship == "P"),
            bride_side=sum(1 for g in self.guests if g.relationship == "R"),
        )

    # -------- family groups --------

    def family_members(self, family_group: Optional[int], exclude_id: Optional[int] = None) -> List[Guest]:
        """Guests sharing ``family_group``, minus the guest being edited"""
        if family_group is None:
            return []
        return [
            g for g in self.guests
            if g.family_group == family_group and g.id != exclude_id
        ]

    def family_groups(self) -> Dict[int, List[Guest]]:
        groups: Dict[int, List[Guest]] = defaultdict(list)
        for guest in self.guests:
            if guest.family_group is not None:
                groups[guest.family_group].append(guest)
        return dict(sorted(groups.items()))

    def next_family_group(self) -> int:
        """First group number not used yet"""
        used = [g.family_group for g in self.guests if g.family_group is not None]
        return max(used, default=0) + 1

    # -------- selection --------

    @property
    def selected_ids(self) -> FrozenSet[int]:
        return frozenset(self._selected)

    def select(self, guest_id: int) -> None:
        if any(g.id == guest_id for g in self.visible()):
            self._selected.add(guest_id)

    def deselect(self, guest_id: int) -> None:
        self._selected.discard(guest_id)

    def toggle(self, guest_id: int) -> None:
        if guest_id in self._selected:
            self.deselect(guest_id)
        else:
            self.select(guest_id)

    def toggle_all(self) -> None:
        """Select every visible guest, or clear the selection if all already are"""
        if self.all_selected:
            self._selected.clear()
        else:
            self._selected = {g.id for g in self.visible()}

    def clear_selection(self) -> None:
        self._selected.clear()

    @property
    def all_selected(self) -> bool:
        visible = self.visible()
        return bool(visible) and len(self._selected) == len(visible)

    @property
    def some_selected(self) -> bool:
        return 0 < len(self._selected) < len(self.visible())
