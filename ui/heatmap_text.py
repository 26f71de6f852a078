# ui/heatmap_text.py

from core.heatmap import DAYS_PER_WEEK, HeatmapProjection, TopicStats
from core.models import Topic

LEVEL_GLYPHS = ["·", "▁", "▃", "▅", "▇", "█"]
DAY_LABELS = ["   ", "Mon", "   ", "Wed", "   ", "Fri", "   "]


def streak_emoji(streak: int):
    if streak >= 30:
        return "🏆"
    elif streak >= 7:
        return "🔥"
    elif streak >= 3:
        return "✨"
    else:
        return "🔹"


def render_strip(projection: HeatmapProjection) -> str:
    """The 53-week strip as 7 text rows, Sunday on top; days after today stay blank"""
    today = projection.today.isoformat()
    weeks = projection.weeks

    header = [" "] * len(weeks)
    for column, name in projection.month_labels():
        for offset, char in enumerate(name):
            if column + offset < len(header):
                header[column + offset] = char

    lines = ["    " + "".join(header)]
    for row in range(DAYS_PER_WEEK):
        glyphs = []
        for week in weeks:
            cell = week[row]
            glyphs.append(" " if cell.date > today else LEVEL_GLYPHS[cell.level])
        lines.append(f"{DAY_LABELS[row]} " + "".join(glyphs))

    lines.append("    Less " + " ".join(LEVEL_GLYPHS) + " More")
    return "\n".join(lines)


def render_stats(stats: TopicStats, unit: str) -> str:
    return (
        f"Total: {stats.total_all_time} {unit} | "
        f"This week: {stats.total_this_week} | "
        f"Today: {stats.today_value} | "
        f"Streak: {stats.current_streak} {streak_emoji(stats.current_streak)} "
        f"(longest {stats.longest_streak})"
    )


def render_topic(topic: Topic, projection: HeatmapProjection) -> str:
    return "\n".join([
        f"{topic.name} ({topic.unit}) as of {projection.today.isoformat()}",
        render_strip(projection),
        render_stats(projection.stats, topic.unit)
    ])
