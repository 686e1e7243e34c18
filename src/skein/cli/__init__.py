from .app import app, app_state, main
from . import commands  # noqa: F401

__all__ = ['app', 'app_state', 'main']
