"""
Heatmap Tracker - Core Package
Topic model, heatmap engine and topic storage
"""

from .exceptions import (
    TrackerError,
    TopicNotFoundError,
    ValidationError,
    PersistenceError
)

from .models import Topic

from .heatmap import (
    HeatmapCell,
    TopicStats,
    MonthGrid,
    YearGrid,
    HeatmapProjection,
    heatmap_level,
    compute_stats,
    build_year_strip,
    build_month_grids,
    project
)

from .storage import (
    TopicStore,
    MemoryTopicStore,
    JsonFileTopicStore,
    create_store
)

__all__ = [
    # Errors
    'TrackerError',
    'TopicNotFoundError',
    'ValidationError',
    'PersistenceError',

    # Models
    'Topic',

    # Engine
    'HeatmapCell',
    'TopicStats',
    'MonthGrid',
    'YearGrid',
    'HeatmapProjection',
    'heatmap_level',
    'compute_stats',
    'build_year_strip',
    'build_month_grids',
    'project',

    # Storage
    'TopicStore',
    'MemoryTopicStore',
    'JsonFileTopicStore',
    'create_store'
]
