"""Tests for the calendar/heatmap engine."""

from datetime import date, timedelta

import pytest

from core.heatmap import (
    LAYOUT_MONTH,
    LAYOUT_YEAR,
    MAX_LEVEL,
    STRIP_CELLS,
    build_month_grid,
    compute_stats,
    current_streak,
    grid_years,
    heatmap_level,
    longest_streak,
    peak_value,
    project,
    week_total,
    year_strip_window,
)

TODAY = date(2024, 1, 10)


class TestHeatmapLevel:
    def test_zero_and_negative_are_level_zero(self) -> None:
        assert heatmap_level(0, 10) == 0
        assert heatmap_level(-3, 10) == 0

    @pytest.mark.parametrize(
        "value, expected",
        [(1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (6, 3), (7, 4), (8, 4), (9, 5), (10, 5)],
    )
    def test_buckets_relative_to_peak(self, value: float, expected: int) -> None:
        assert heatmap_level(value, 10) == expected

    def test_value_above_peak_clamps_to_max_level(self) -> None:
        assert heatmap_level(25, 10) == MAX_LEVEL

    def test_non_positive_peak_is_treated_as_one(self) -> None:
        assert heatmap_level(1, 0) == MAX_LEVEL
        assert heatmap_level(0.5, 0) == 3

    def test_levels_are_monotonic(self) -> None:
        values = [0, 0.1, 0.5, 1, 2.5, 3, 4.2, 6, 7.9, 8, 9.99, 10]
        levels = [heatmap_level(v, 10) for v in values]
        assert levels == sorted(levels)
        assert all(0 <= level <= MAX_LEVEL for level in levels)


class TestPeakValue:
    def test_empty_data_defaults_to_one(self) -> None:
        assert peak_value({}) == 1

    def test_largest_positive_value(self) -> None:
        assert peak_value({"2024-01-01": 0.5, "2024-01-02": 3.5}) == 3.5

    def test_fractional_peak_is_kept(self) -> None:
        assert peak_value({"2024-01-01": 0.25}) == 0.25


class TestYearStrip:
    def test_window_starts_on_sunday(self) -> None:
        start, end = year_strip_window(TODAY)
        assert start == date(2023, 1, 8)
        assert start.weekday() == 6
        assert end == date(2024, 1, 13)
        assert (end - start).days + 1 == STRIP_CELLS

    def test_window_covers_364_days_back(self) -> None:
        start, end = year_strip_window(TODAY)
        assert start <= TODAY - timedelta(days=364)
        assert start <= TODAY <= end

    def test_strip_has_371_contiguous_cells(self) -> None:
        cells = project({}, TODAY).cells
        assert len(cells) == STRIP_CELLS
        days = [date.fromisoformat(cell.date) for cell in cells]
        assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))

    def test_empty_data_is_all_level_zero(self) -> None:
        projection = project({}, TODAY)
        assert all(cell.level == 0 and cell.value == 0 for cell in projection.cells)
        assert projection.max_value == 1

    def test_cells_carry_values_and_levels(self, coding_topic) -> None:
        projection = project(coding_topic.data, TODAY)
        assert projection.cell_for("2024-01-09").value == 4
        assert projection.cell_for("2024-01-09").level == 3
        assert projection.cell_for("2023-12-25").level == MAX_LEVEL
        assert projection.cell_for(date(2024, 1, 8)).level == 2

    def test_weeks_are_sunday_first_columns(self) -> None:
        weeks = project({}, TODAY).weeks
        assert len(weeks) == 53
        assert all(len(week) == 7 for week in weeks)
        assert all(date.fromisoformat(week[0].date).weekday() == 6 for week in weeks)

    def test_month_labels(self) -> None:
        labels = project({}, TODAY).month_labels()
        assert labels[0] == (3, "Feb")
        assert labels[-1] == (51, "Jan")
        assert len(labels) == 12


class TestMonthGrids:
    def test_leading_blanks_before_first_day(self) -> None:
        # 2024-02-01 is a Thursday
        grid = build_month_grid(2024, 2, {}, 1)
        assert grid.cells[:4] == [None, None, None, None]
        assert grid.cells[4].date == "2024-02-01"
        assert len(grid.cells) == 4 + 29
        assert grid.name == "Feb"

    def test_month_starting_on_sunday_has_no_blanks(self) -> None:
        # 2023-10-01 is a Sunday
        grid = build_month_grid(2023, 10, {}, 1)
        assert grid.cells[0].date == "2023-10-01"

    def test_years_with_entries_plus_current(self) -> None:
        data = {"2021-06-01": 1, "2023-03-03": 0}
        assert grid_years(data, TODAY) == [2021, 2024]

    def test_month_layout_builds_twelve_months_per_year(self, coding_topic) -> None:
        projection = project(coding_topic.data, TODAY, LAYOUT_MONTH)
        assert [year.year for year in projection.years] == [2023, 2024]
        assert all(len(year.months) == 12 for year in projection.years)
        assert projection.years[0].total == 8
        assert projection.years[1].months[0].total == 7

    def test_month_cells_use_the_shared_peak(self, coding_topic) -> None:
        projection = project(coding_topic.data, TODAY, LAYOUT_MONTH)
        december = projection.years[0].months[11]
        christmas = next(cell for cell in december.cells if cell and cell.date == "2023-12-25")
        assert christmas.level == MAX_LEVEL

    def test_cell_for_outside_strip(self) -> None:
        projection = project({"2020-05-05": 3}, TODAY, LAYOUT_MONTH)
        assert projection.cell_for("2020-05-05").level == MAX_LEVEL
        assert projection.cell_for("2019-01-01").value == 0

    def test_year_layout_has_no_month_grids(self) -> None:
        assert project({"2024-01-01": 1}, TODAY, LAYOUT_YEAR).years == []

    def test_unknown_layout_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            project({}, TODAY, "decade")


class TestStatistics:
    def test_streak_stops_at_first_gap(self) -> None:
        data = {"2024-01-10": 5, "2024-01-09": 3, "2024-01-07": 2}
        assert current_streak(data, TODAY) == 2

    def test_streak_is_zero_without_entry_today(self) -> None:
        assert current_streak({"2024-01-09": 3}, TODAY) == 0

    def test_week_total_is_seven_days_inclusive(self) -> None:
        data = {"2024-01-10": 5, "2024-01-03": 100}
        assert week_total(data, TODAY) == 5

    def test_week_total_includes_window_start(self) -> None:
        assert week_total({"2024-01-04": 2, "2024-01-10": 1}, TODAY) == 3

    def test_week_total_excludes_future_dates(self) -> None:
        assert week_total({"2024-01-11": 9}, TODAY) == 0

    def test_longest_streak(self) -> None:
        data = {"2023-05-01": 1, "2023-05-02": 1, "2023-05-03": 1, "2024-01-10": 1}
        assert longest_streak(data) == 3
        assert longest_streak({}) == 0

    def test_compute_stats(self, coding_topic) -> None:
        stats = compute_stats(coding_topic.data, TODAY)
        assert stats.total_all_time == 15
        assert stats.total_this_week == 7
        assert stats.today_value == 1
        assert stats.current_streak == 3
        assert stats.longest_streak == 3
        assert stats.active_days == 4
        assert stats.max_value == 8

    def test_empty_data_stats(self) -> None:
        stats = compute_stats({}, TODAY)
        assert stats.total_all_time == 0
        assert stats.total_this_week == 0
        assert stats.today_value == 0
        assert stats.current_streak == 0
        assert stats.max_value == 1

    def test_fractional_values(self) -> None:
        stats = compute_stats({"2024-01-10": 1.5, "2024-01-09": 0.25}, TODAY)
        assert stats.total_all_time == 1.75
        assert stats.current_streak == 2


class TestProjection:
    def test_same_input_same_output(self, coding_topic) -> None:
        first = project(coding_topic.data, TODAY, LAYOUT_MONTH)
        second = project(coding_topic.data, TODAY, LAYOUT_MONTH)
        assert first.to_dict() == second.to_dict()

    def test_input_map_is_not_mutated(self, coding_topic) -> None:
        data = dict(coding_topic.data)
        project(data, TODAY, LAYOUT_MONTH)
        assert data == coding_topic.data

    def test_to_dict_shape(self, coding_topic) -> None:
        result = project(coding_topic.data, TODAY).to_dict()
        assert result["today"] == "2024-01-10"
        assert result["layout"] == "year"
        assert len(result["cells"]) == STRIP_CELLS
        assert result["stats"]["current_streak"] == 3
