from . import data, pages, topics

__all__ = ['data', 'pages', 'topics']
