"""Unit tests for series identity predicates."""

import pytest

from agenda.events.models import RecurrenceConfig
from agenda.events.series import (
    is_child,
    is_part_of_series,
    is_root_with_children,
    series_members,
    series_root_id,
    shows_recurring_marker,
)


@pytest.fixture
def series(make_event, weekly_rule):
    """A root and three generated instances, plus an unrelated single event."""
    root = make_event(date="2024-01-07", id="root", recurrence=weekly_rule)
    children = [
        make_event(date=day, id=f"child-{n}", parent_event_id="root")
        for n, day in enumerate(["2024-01-21", "2024-02-04", "2024-02-18"], start=1)
    ]
    single = make_event(date="2024-01-09", id="single")
    return root, children, single


class TestSeriesIdentity:
    def test_children_are_children(self, series):
        root, children, single = series

        assert all(is_child(child) for child in children)
        assert not is_child(root)
        assert not is_child(single)

    def test_root_with_children(self, series):
        root, children, single = series
        everything = [root, *children, single]

        assert is_root_with_children(root, everything)
        assert not is_root_with_children(single, everything)
        assert not is_root_with_children(children[0], everything)

    def test_root_without_loaded_children(self, series):
        root, _, single = series

        assert not is_root_with_children(root, [root, single])

    def test_event_without_id_has_no_children(self, make_event):
        unsaved = make_event()
        orphan = make_event(parent_event_id=None)

        assert not is_root_with_children(unsaved, [unsaved, orphan])

    def test_part_of_series(self, series):
        root, children, single = series
        everything = [root, *children, single]

        assert is_part_of_series(root, everything)
        assert all(is_part_of_series(child, everything) for child in children)
        assert not is_part_of_series(single, everything)

    def test_every_member_resolves_to_the_root(self, series):
        root, children, _ = series

        assert {series_root_id(member) for member in [root, *children]} == {"root"}

    def test_series_root_id_needs_an_id(self, make_event):
        with pytest.raises(ValueError):
            series_root_id(make_event())

    def test_series_members(self, series):
        root, children, single = series

        members = series_members("root", [single, *children, root])

        assert [m.id for m in members] == ["child-1", "child-2", "child-3", "root"]


class TestRecurringMarker:
    def test_marker_for_root_and_children(self, series):
        root, children, single = series

        assert shows_recurring_marker(root)
        assert shows_recurring_marker(children[0])
        assert not shows_recurring_marker(single)

    def test_none_rule_draws_no_marker(self, make_event):
        event = make_event(id="x", recurrence=RecurrenceConfig(type="none"))

        assert not shows_recurring_marker(event)
