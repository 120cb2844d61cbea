"""WSGI entry point for production servers."""
from paintquote.app import create_app

app = create_app()
