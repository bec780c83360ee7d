"""Tests for month-grid rendering and the MonthCalendar view."""

from datetime import date
from unittest.mock import Mock

import pytest

from conftest import make_event
from nepp_core.month_calendar import (
    WEEKDAY_HEADERS,
    Direction,
    MonthCalendar,
    SelectionEvent,
    render_month,
    shift_month,
)
from nepp_core.types import EventKind


def cell_for(grid, day: int):
    return next(cell for cell in grid.month_cells if cell.day == day)


class TestShiftMonth:
    """Test 1-indexed month arithmetic."""

    @pytest.mark.parametrize(
        "year,month,delta,expected",
        [
            (2024, 12, 1, (2025, 1)),
            (2025, 1, -1, (2024, 12)),
            (2024, 6, 0, (2024, 6)),
            (2024, 6, 18, (2025, 12)),
            (2024, 13, 0, (2025, 1)),
            (2024, 0, 0, (2023, 12)),
        ],
    )
    def test_shift(self, year, month, delta, expected) -> None:
        assert shift_month(year, month, delta) == expected


class TestRenderMonth:
    """Test the month grid layout."""

    @pytest.mark.parametrize(
        "year,month,days,leading",
        [
            (2024, 4, 30, 1),
            (2024, 2, 29, 4),
            (2023, 2, 28, 3),
            (2024, 12, 31, 0),
            (2024, 6, 30, 6),
        ],
    )
    def test_grid_shape(self, year, month, days, leading) -> None:
        grid = render_month(year, month, today=date(2000, 1, 1))

        assert len(grid.cells) % 7 == 0
        assert len(grid.month_cells) == days
        assert [cell.day for cell in grid.month_cells] == list(range(1, days + 1))
        assert all(not cell.in_month for cell in grid.cells[:leading])
        assert grid.cells[leading].in_month
        assert grid.cells[leading].day == 1
        assert all(len(week) == 7 for week in grid.weeks)

    def test_padding_uses_adjacent_month_days(self) -> None:
        grid = render_month(2025, 1, today=date(2000, 1, 1))

        padding = grid.cells[:3]
        assert [(cell.year, cell.month, cell.day) for cell in padding] == [
            (2024, 12, 29),
            (2024, 12, 30),
            (2024, 12, 31),
        ]
        trailing = [cell for cell in grid.cells[3:] if not cell.in_month]
        assert [cell.day for cell in trailing] == [1]
        assert trailing[0].month == 2

    def test_first_column_is_sunday(self) -> None:
        grid = render_month(2024, 4, today=date(2000, 1, 1))
        assert WEEKDAY_HEADERS[0] == "Sun"
        assert all(cell.date.weekday() == 6 for cell in grid.cells[::7])

    def test_day_flags_and_events(self) -> None:
        day = date(2024, 6, 15)
        events = [
            make_event("e1", day, "09:00"),
            make_event("announcement-a1", day, "12:00", kind=EventKind.ANNOUNCEMENT),
        ]
        grid = render_month(2024, 6, {"2024-06-15": events}, today=date(2024, 6, 15))

        cell = cell_for(grid, 15)
        assert cell.events == events
        assert cell.has_events
        assert cell.has_announcement
        assert not cell.has_form_due
        assert cell.is_today
        assert cell.date_string == "2024-06-15"

        quiet = cell_for(grid, 14)
        assert quiet.events == []
        assert not (quiet.has_events or quiet.has_announcement or quiet.has_form_due)
        assert not quiet.is_today

    def test_form_due_only_day(self) -> None:
        day = date(2024, 6, 12)
        form = make_event("form-f1", day, "23:59", kind=EventKind.FORM_DUE)
        cell = cell_for(render_month(2024, 6, {"2024-06-12": [form]}), 12)

        assert cell.has_form_due
        assert not cell.has_events

    def test_padding_cells_never_carry_events(self) -> None:
        spill = make_event("e1", date(2024, 5, 31))
        grid = render_month(2024, 6, {"2024-05-31": [spill]})

        padding = [cell for cell in grid.cells if not cell.in_month]
        assert any(cell.day == 31 for cell in padding)
        assert all(cell.events == [] for cell in padding)
        assert all(not cell.has_events for cell in padding)

    def test_title(self) -> None:
        assert render_month(2024, 3).title == "March 2024"


class TestNavigation:
    """Test month navigation."""

    def test_next_rolls_over_year(self) -> None:
        cal = MonthCalendar(2024, 12)

        assert cal.navigate("next") == (2025, 1)
        assert cal.grid.year == 2025
        assert cal.grid.month == 1

    def test_prev_rolls_back_year(self) -> None:
        cal = MonthCalendar(2025, 1)
        assert cal.navigate(Direction.PREV) == (2024, 12)

    def test_round_trip(self) -> None:
        cal = MonthCalendar(2024, 6)
        cal.navigate("next")
        cal.navigate("prev")
        assert cal.view == (2024, 6)

    def test_invalid_direction(self) -> None:
        cal = MonthCalendar(2024, 6)
        with pytest.raises(ValueError):
            cal.navigate("sideways")
        assert cal.view == (2024, 6)

    def test_show_month(self) -> None:
        cal = MonthCalendar(2024, 6)
        assert cal.show_month(2023, 2) == (2023, 2)
        assert len(cal.grid.month_cells) == 28

    def test_defaults_to_current_month(self) -> None:
        today = date.today()
        assert MonthCalendar().view == (today.year, today.month)


class TestSelection:
    """Test day selection and listeners."""

    def test_select_in_month_day_notifies_listeners(self) -> None:
        cal = MonthCalendar(2024, 6)
        listener = Mock()
        cal.on_select(listener)

        selection = cal.select_day(cell_for(cal.grid, 15))

        assert selection == SelectionEvent(date=date(2024, 6, 15), date_string="2024-06-15")
        listener.assert_called_once_with(selection)
        assert cal.selected_date == date(2024, 6, 15)

    def test_padding_selection_is_ignored(self) -> None:
        cal = MonthCalendar(2024, 6)
        listener = Mock()
        cal.on_select(listener)
        cal.select_day(cell_for(cal.grid, 15))

        padding = cal.grid.cells[0]
        assert not padding.in_month
        assert cal.select_day(padding) is None
        assert listener.call_count == 1
        assert cal.selected_date == date(2024, 6, 15)

    def test_cell_from_previous_view_is_ignored(self) -> None:
        cal = MonthCalendar(2024, 6)
        listener = Mock()
        cal.on_select(listener)
        june_15 = cell_for(cal.grid, 15)

        cal.navigate("next")

        assert cal.view == (2024, 7)
        assert cal.select_day(june_15) is None
        listener.assert_not_called()
        assert cal.selected_date is None

    def test_decorator_registration_and_removal(self) -> None:
        cal = MonthCalendar(2024, 6)
        received = []

        @cal.on_select
        def remember(selection: SelectionEvent) -> None:
            received.append(selection.date_string)

        cal.select_day(cell_for(cal.grid, 1))
        cal.remove_listener(remember)
        cal.select_day(cell_for(cal.grid, 2))

        assert received == ["2024-06-01"]

    def test_instances_are_independent(self) -> None:
        full = MonthCalendar(2024, 6)
        mini = MonthCalendar(2024, 6, mini=True)
        full_listener, mini_listener = Mock(), Mock()
        full.on_select(full_listener)
        mini.on_select(mini_listener)
        full.set_events([make_event("e1", date(2024, 6, 3))])

        full.select_day(cell_for(full.grid, 3))
        full.navigate("next")

        mini_listener.assert_not_called()
        assert mini.selected_date is None
        assert mini.view == (2024, 6)
        assert mini.events_for_date(date(2024, 6, 3)) == []


class TestEntries:
    """Test replacing and adding calendar entries."""

    def test_set_events_indexes_by_day(self, mixed_events) -> None:
        cal = MonthCalendar(2024, 6)
        cal.set_events(mixed_events)

        assert [event.id for event in cal.events_for_date("2024-06-15")] == [
            "ev-2",
            "announcement-a1",
        ]
        assert cell_for(cal.grid, 12).has_form_due
        assert sorted(cal.events_by_date) == [
            "2024-06-09",
            "2024-06-12",
            "2024-06-15",
            "2024-06-16",
            "2024-07-01",
        ]

    def test_set_events_replaces_previous_entries(self, mixed_events) -> None:
        cal = MonthCalendar(2024, 6)
        cal.set_events(mixed_events)
        cal.set_events([])

        assert cal.events_by_date == {}
        assert all(cell.events == [] for cell in cal.grid.cells)

    def test_set_events_skips_unusable_entries(self, caplog) -> None:
        cal = MonthCalendar(2024, 6)
        entries = [
            {"id": "m1", "title": "Mapped", "date": "2024-06-20"},
            {"id": "m2", "title": "No date", "date": "whenever"},
            {"title": "No id", "date": "2024-06-21"},
            42,
        ]

        with caplog.at_level("WARNING", logger="nepp_core.month_calendar"):
            cal.set_events(entries)

        assert list(cal.events_by_date) == ["2024-06-20"]
        assert cell_for(cal.grid, 20).has_events
        assert "Skipped 3 calendar entries" in caplog.text

    def test_add_event(self) -> None:
        cal = MonthCalendar(2024, 6)

        assert cal.add_event(make_event("e1", date(2024, 6, 4)))
        assert not cal.add_event({"id": "e2", "title": "x", "date": None})
        assert [event.id for event in cal.events_for_date(date(2024, 6, 4))] == ["e1"]
        assert cell_for(cal.grid, 4).has_events

    def test_events_by_date_is_a_copy(self) -> None:
        cal = MonthCalendar(2024, 6)
        cal.set_events([make_event("e1", date(2024, 6, 4))])

        cal.events_by_date["2024-06-04"].clear()

        assert len(cal.events_for_date("2024-06-04")) == 1

    def test_events_for_unparseable_day(self) -> None:
        assert MonthCalendar(2024, 6).events_for_date("someday") == []


class TestMiniMode:
    """Test reduced-density presentation."""

    def test_toggle_keeps_view_entries_and_selection(self) -> None:
        cal = MonthCalendar(2024, 6)
        cal.set_events([make_event("e1", date(2024, 6, 4))])
        cal.select_day(cell_for(cal.grid, 4))

        cal.set_mini_mode(True)

        assert cal.is_mini
        assert cal.grid.mini
        assert cal.view == (2024, 6)
        assert cal.selected_date == date(2024, 6, 4)
        assert cell_for(cal.grid, 4).has_events

        cal.set_mini_mode(False)
        assert not cal.grid.mini
