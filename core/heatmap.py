#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Heatmap Tracker - Calendar/Heatmap Engine
Projects a topic's sparse date -> value map into heatmap cells and statistics

Everything here is a pure function of ``(data, today)``. ``today`` is always
passed in by the caller; nothing in this module reads the clock.

Version: 1.0.0
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Tuple

from utils.datetime_utils import parse_iso_date

# ===== CONSTANTS =====

LEVEL_THRESHOLDS = (0.2, 0.4, 0.6, 0.8)
MAX_LEVEL = len(LEVEL_THRESHOLDS) + 1

DAYS_PER_WEEK = 7
STRIP_WEEKS = 53
STRIP_CELLS = STRIP_WEEKS * DAYS_PER_WEEK
STRIP_LOOKBACK_DAYS = 364
WEEK_WINDOW_DAYS = 7

LAYOUT_YEAR = "year"
LAYOUT_MONTH = "month"
LAYOUTS = (LAYOUT_YEAR, LAYOUT_MONTH)

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
]

# ===== RESULT TYPES =====

@dataclass(frozen=True)
class HeatmapCell:
    """One calendar day of the grid"""
    date: str
    value: float
    level: int

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "value": self.value, "level": self.level}


@dataclass(frozen=True)
class TopicStats:
    """Aggregate statistics for one topic"""
    total_all_time: float = 0
    total_this_week: float = 0
    today_value: float = 0
    current_streak: int = 0
    longest_streak: int = 0
    active_days: int = 0
    max_value: float = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_all_time": self.total_all_time,
            "total_this_week": self.total_this_week,
            "today_value": self.today_value,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "active_days": self.active_days,
            "max_value": self.max_value
        }


@dataclass
class MonthGrid:
    """Sunday-first 7-wide grid of one month; ``None`` marks a blank slot"""
    year: int
    month: int
    cells: List[Optional[HeatmapCell]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def weeks(self) -> List[List[Optional[HeatmapCell]]]:
        return [self.cells[i:i + DAYS_PER_WEEK] for i in range(0, len(self.cells), DAYS_PER_WEEK)]

    @property
    def total(self) -> float:
        return sum(cell.value for cell in self.cells if cell is not None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "name": self.name,
            "cells": [cell.to_dict() if cell else None for cell in self.cells]
        }


@dataclass
class YearGrid:
    year: int
    months: List[MonthGrid] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(month.total for month in self.months)

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "months": [m.to_dict() for m in self.months]}


@dataclass
class HeatmapProjection:
    """Layout-agnostic result of one engine run

    ``cells`` is the dense 371-day strip ending in the week of ``today``.
    ``years`` is only filled for the month layout. ``cell_for`` answers for
    any date, inside the strip or not.
    """
    today: date
    layout: str
    max_value: float
    cells: List[HeatmapCell]
    stats: TopicStats
    years: List[YearGrid] = field(default_factory=list)
    _data: Dict[str, float] = field(default_factory=dict, repr=False)
    _lookup: Dict[str, HeatmapCell] = field(default_factory=dict, repr=False)

    def cell_for(self, day) -> HeatmapCell:
        key = day.isoformat() if isinstance(day, date) else day
        cell = self._lookup.get(key)
        if cell is None:
            cell = make_cell(key, self._data, self.max_value)
        return cell

    @property
    def weeks(self) -> List[List[HeatmapCell]]:
        """Strip cells split into week columns, Sunday first"""
        return [self.cells[i:i + DAYS_PER_WEEK] for i in range(0, len(self.cells), DAYS_PER_WEEK)]

    def month_labels(self) -> List[Tuple[int, str]]:
        """(week column, month name) for every column where a month starts"""
        labels = []
        for index, week in enumerate(self.weeks):
            for cell in week:
                if cell.date.endswith("-01"):
                    labels.append((index, MONTH_NAMES[int(cell.date[5:7]) - 1]))
                    break
        return labels

    def to_dict(self) -> Dict[str, Any]:
        return {
            "today": self.today.isoformat(),
            "layout": self.layout,
            "max_value": self.max_value,
            "cells": [cell.to_dict() for cell in self.cells],
            "years": [year.to_dict() for year in self.years],
            "stats": self.stats.to_dict()
        }

# ===== LEVELS =====

def heatmap_level(value: float, max_value: float) -> int:
    """Bucket a value into 0..5 relative to the topic's own peak"""
    if value <= 0:
        return 0
    if max_value <= 0:
        max_value = 1

    ratio = value / max_value
    for level, threshold in enumerate(LEVEL_THRESHOLDS, start=1):
        if ratio <= threshold:
            return level
    return MAX_LEVEL


def peak_value(data: Mapping[str, float]) -> float:
    """Largest positive value, 1 when there is none"""
    positive = [value for value in data.values() if value > 0]
    return max(positive) if positive else 1


def make_cell(day: str, data: Mapping[str, float], max_value: float) -> HeatmapCell:
    value = data.get(day, 0)
    return HeatmapCell(date=day, value=value, level=heatmap_level(value, max_value))

# ===== GRIDS =====

def year_strip_window(today: date) -> Tuple[date, date]:
    """First and last day of the 53-week strip

    Starts 364 days before today, moved back to the previous Sunday.
    """
    start = today - timedelta(days=STRIP_LOOKBACK_DAYS)
    # date.weekday(): Monday is 0, Sunday is 6
    start -= timedelta(days=(start.weekday() + 1) % DAYS_PER_WEEK)
    return start, start + timedelta(days=STRIP_CELLS - 1)


def build_year_strip(data: Mapping[str, float], today: date,
                     max_value: Optional[float] = None) -> List[HeatmapCell]:
    if max_value is None:
        max_value = peak_value(data)

    start, _ = year_strip_window(today)
    return [
        make_cell((start + timedelta(days=offset)).isoformat(), data, max_value)
        for offset in range(STRIP_CELLS)
    ]


def build_month_grid(year: int, month: int, data: Mapping[str, float], max_value: float) -> MonthGrid:
    first = date(year, month, 1)
    blanks = (first.weekday() + 1) % DAYS_PER_WEEK
    _, days_in_month = calendar.monthrange(year, month)

    cells: List[Optional[HeatmapCell]] = [None] * blanks
    cells.extend(
        make_cell(date(year, month, day).isoformat(), data, max_value)
        for day in range(1, days_in_month + 1)
    )
    return MonthGrid(year=year, month=month, cells=cells)


def grid_years(data: Mapping[str, float], today: date) -> List[int]:
    """Years holding at least one positive entry, plus the current year"""
    years = {int(day[:4]) for day, value in data.items() if value > 0}
    years.add(today.year)
    return sorted(years)


def build_month_grids(data: Mapping[str, float], today: date,
                      max_value: Optional[float] = None) -> List[YearGrid]:
    if max_value is None:
        max_value = peak_value(data)

    return [
        YearGrid(year=year, months=[build_month_grid(year, month, data, max_value) for month in range(1, 13)])
        for year in grid_years(data, today)
    ]

# ===== STATISTICS =====

def current_streak(data: Mapping[str, float], today: date) -> int:
    """Consecutive positive days ending today; 0 when today is empty"""
    streak = 0
    day = today
    while data.get(day.isoformat(), 0) > 0:
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_streak(data: Mapping[str, float]) -> int:
    completed_dates = sorted(parse_iso_date(day) for day, value in data.items() if value > 0)
    if not completed_dates:
        return 0

    max_streak = 1
    streak = 1
    for i in range(1, len(completed_dates)):
        if completed_dates[i] == completed_dates[i - 1] + timedelta(days=1):
            streak += 1
            max_streak = max(max_streak, streak)
        else:
            streak = 1

    return max_streak


def week_total(data: Mapping[str, float], today: date) -> float:
    """Sum of the seven calendar days ending today, both ends inclusive"""
    week_start = today - timedelta(days=WEEK_WINDOW_DAYS - 1)
    return sum(
        value for day, value in data.items()
        if week_start <= parse_iso_date(day) <= today
    )


def compute_stats(data: Mapping[str, float], today: date) -> TopicStats:
    return TopicStats(
        total_all_time=sum(data.values()),
        total_this_week=week_total(data, today),
        today_value=data.get(today.isoformat(), 0),
        current_streak=current_streak(data, today),
        longest_streak=longest_streak(data),
        active_days=sum(1 for value in data.values() if value > 0),
        max_value=peak_value(data)
    )

# ===== PROJECTION =====

def project(data: Mapping[str, float], today: date, layout: str = LAYOUT_YEAR) -> HeatmapProjection:
    """Run the engine once for a topic's data as of ``today``"""
    if layout not in LAYOUTS:
        raise ValueError(f"Unknown heatmap layout: {layout}")

    snapshot = dict(data)
    max_value = peak_value(snapshot)
    cells = build_year_strip(snapshot, today, max_value)
    years = build_month_grids(snapshot, today, max_value) if layout == LAYOUT_MONTH else []

    lookup = {cell.date: cell for cell in cells}
    for year in years:
        for month in year.months:
            lookup.update((cell.date, cell) for cell in month.cells if cell is not None)

    return HeatmapProjection(
        today=today,
        layout=layout,
        max_value=max_value,
        cells=cells,
        stats=compute_stats(snapshot, today),
        years=years,
        _data=snapshot,
        _lookup=lookup
    )
