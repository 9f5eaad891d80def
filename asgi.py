"""
asgi.py -- Application assembly for the myFlix API.

This is the ONLY place that reads process configuration for the web app:
Settings are built once here and handed to create_app().

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import create_app
from core.config import get_settings

app = create_app(get_settings())
