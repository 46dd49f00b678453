# server/main.py
from pipeshell.api import app

__all__ = ["app"]
