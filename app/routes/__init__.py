"""HTTP routes: server-rendered pages and the JSON API."""
from . import api, pages

__all__ = [
    'api',
    'pages'
]
