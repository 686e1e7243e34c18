from . import plugin

__all__ = ['plugin']
