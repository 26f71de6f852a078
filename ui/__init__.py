from .heatmap_text import render_stats, render_strip, render_topic

__all__ = ['render_stats', 'render_strip', 'render_topic']
