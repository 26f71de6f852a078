"""
Heatmap Tracker - Web Dashboard
FastAPI JSON API and server-rendered heatmap pages
"""

from .app import create_app, run_dashboard

__all__ = ['create_app', 'run_dashboard']
