"""Unit tests for the overlap layout engine and day geometry."""

from datetime import datetime

import pytest

from agenda.config.settings import AgendaSettings
from agenda.layout import (
    DayLayout,
    HourRange,
    InvalidHourRangeError,
    LayoutError,
    PositionedEvent,
    layout,
    layout_day,
    layout_week,
    now_offset,
    vertical_span,
)


def _columns(positioned):
    return [(p.event.title, p.column_index, p.columns_count) for p in positioned]


class TestLayout:
    """Column assignment for timed events."""

    def test_empty_day(self):
        assert layout([]) == []

    def test_back_to_back_events_do_not_overlap(self, make_event):
        first = make_event(title="A", start_time="09:00", end_time="10:00")
        second = make_event(title="B", start_time="10:00", end_time="11:00")

        assert _columns(layout([first, second])) == [("A", 0, 1), ("B", 0, 1)]

    def test_overlapping_events_share_the_width(self, make_event):
        first = make_event(title="A", start_time="09:00", end_time="10:30")
        second = make_event(title="B", start_time="10:00", end_time="11:00")

        assert _columns(layout([second, first])) == [("A", 0, 2), ("B", 1, 2)]

    def test_equal_starts_keep_input_order(self, make_event):
        second = make_event(title="second", start_time="09:00", end_time="10:00")
        first = make_event(title="first", start_time="09:00", end_time="09:30")

        assert _columns(layout([first, second])) == [("first", 0, 2), ("second", 1, 2)]

    def test_chain_joins_one_cluster(self, make_event):
        a = make_event(title="A", start_time="09:00", end_time="10:00")
        b = make_event(title="B", start_time="09:30", end_time="11:00")
        c = make_event(title="C", start_time="10:30", end_time="12:00")

        assert _columns(layout([c, b, a])) == [("A", 0, 3), ("B", 1, 3), ("C", 2, 3)]

    def test_separate_clusters_in_creation_order(self, make_event):
        a = make_event(title="A", start_time="09:00", end_time="10:00")
        b = make_event(title="B", start_time="09:30", end_time="10:30")
        c = make_event(title="C", start_time="11:00", end_time="12:00")
        d = make_event(title="D", start_time="11:30", end_time="12:30")
        e = make_event(title="E", start_time="11:45", end_time="12:15")

        result = layout([d, c, e, b, a])

        assert _columns(result) == [
            ("A", 0, 2),
            ("B", 1, 2),
            ("C", 0, 3),
            ("D", 1, 3),
            ("E", 2, 3),
        ]

    def test_event_past_midnight_overlaps_later_events(self, make_event):
        late = make_event(title="late", start_time="22:00", end_time="01:00")
        inner = make_event(title="inner", start_time="22:30", end_time="23:00")

        assert _columns(layout([inner, late])) == [("late", 0, 2), ("inner", 1, 2)]

    def test_event_past_midnight_leaves_earlier_events_alone(self, make_event):
        early = make_event(title="early", start_time="20:00", end_time="21:00")
        late = make_event(title="late", start_time="22:00", end_time="01:00")

        assert _columns(layout([late, early])) == [("early", 0, 1), ("late", 0, 1)]

    def test_every_event_is_positioned_once(self, make_event):
        events = [
            make_event(
                title=str(n), start_time=f"{8 + n % 4:02d}:00", end_time=f"{10 + n % 4:02d}:00"
            )
            for n in range(8)
        ]

        result = layout(events)

        assert sorted(p.event.title for p in result) == sorted(e.title for e in events)
        assert all(0 <= p.column_index < p.columns_count for p in result)

    def test_horizontal_slot(self, make_event):
        positioned = PositionedEvent(event=make_event(), column_index=1, columns_count=2)

        assert positioned.horizontal_slot == (0.5, 1.0)


class TestHourRange:
    def test_defaults_draw_six_to_midnight(self):
        hour_range = HourRange()

        assert hour_range.hours == 18
        assert hour_range.hour_labels()[0] == 6
        assert hour_range.hour_labels()[-1] == 23

    @pytest.mark.parametrize(("start", "end"), [(10, 10), (12, 8), (-1, 5), (0, 25)])
    def test_rejects_invalid_ranges(self, start, end):
        with pytest.raises(InvalidHourRangeError):
            HourRange(start, end)

    def test_invalid_range_is_a_layout_error(self):
        with pytest.raises(LayoutError):
            HourRange(5, 5)

    def test_from_settings(self, tmp_path):
        settings = AgendaSettings(
            layout={"day_start_hour": 7, "day_end_hour": 22}, _config_file=tmp_path / "none"
        )

        assert HourRange.from_settings(settings) == HourRange(7, 22)

    def test_from_missing_settings(self):
        assert HourRange.from_settings(None) == HourRange()


class TestGeometry:
    """Vertical placement and the current-time indicator."""

    def test_span_inside_range(self, make_event):
        event = make_event(start_time="08:00", end_time="09:30")

        assert vertical_span(event) == (2.0, 1.5)

    def test_span_clipped_at_range_start(self, make_event):
        event = make_event(start_time="05:00", end_time="07:00")

        assert vertical_span(event) == (0.0, 1.0)

    def test_span_outside_range(self, make_event):
        assert vertical_span(make_event(start_time="04:00", end_time="06:00")) is None

    def test_span_until_end_of_day(self, make_event):
        top, height = vertical_span(make_event(start_time="23:00", end_time="23:59"))

        assert top == 17.0
        assert height == pytest.approx(59 / 60)

    def test_span_past_midnight_is_drawn_to_range_end(self, make_event):
        assert vertical_span(make_event(start_time="22:00", end_time="01:00")) == (16.0, 2.0)

    def test_span_with_custom_range(self, make_event):
        event = make_event(start_time="17:00", end_time="19:00")

        assert vertical_span(event, HourRange(8, 18)) == (9.0, 1.0)

    def test_now_offset_on_the_drawn_day(self):
        assert now_offset(datetime(2024, 6, 10, 14, 30), "2024-06-10") == 8.5

    def test_now_offset_on_another_day(self):
        assert now_offset(datetime(2024, 6, 11, 14, 30), "2024-06-10") is None

    def test_now_offset_outside_hours(self):
        assert now_offset(datetime(2024, 6, 10, 5, 59), "2024-06-10") is None


class TestDayLayout:
    @pytest.fixture
    def events(self, make_event):
        return [
            make_event(title="Retiro", date="2024-06-10", end_date="2024-06-12", is_all_day=True),
            make_event(title="Ensaio", date="2024-06-11", start_time="19:00", end_time="21:00"),
            make_event(title="Estudo", date="2024-06-11", start_time="20:00", end_time="21:30"),
            make_event(title="Vigília", date="2024-06-11", start_time="03:00", end_time="05:00"),
            make_event(title="Culto", date="2024-06-12", start_time="19:00", end_time="21:00"),
        ]

    def test_layout_day(self, events):
        day = layout_day(events, "2024-06-11")

        assert isinstance(day, DayLayout)
        assert day.day == "2024-06-11"
        assert [e.title for e in day.all_day] == ["Retiro"]
        assert _columns(day.positioned) == [
            ("Vigília", 0, 1),
            ("Ensaio", 0, 2),
            ("Estudo", 1, 2),
        ]

    def test_visible_skips_events_outside_range(self, events):
        visible = layout_day(events, "2024-06-11").visible()

        assert [item.event.title for item, _ in visible] == ["Ensaio", "Estudo"]
        assert visible[0][1] == (13.0, 2.0)

    def test_layout_week(self, events):
        week = layout_week(events, "2024-06-11")

        assert [d.day for d in week] == [
            "2024-06-09",
            "2024-06-10",
            "2024-06-11",
            "2024-06-12",
            "2024-06-13",
            "2024-06-14",
            "2024-06-15",
        ]
        assert [len(d.all_day) for d in week] == [0, 1, 1, 1, 0, 0, 0]
        assert [e.event.title for e in week[3].positioned] == ["Culto"]
