"""
shortlink package initializer.
"""

from . import idgen
from . import shortener
from . import storage
from . import tracking

__all__ = ["idgen", "shortener", "storage", "tracking"]
