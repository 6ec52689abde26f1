from .base import BaseTracker
from .tracker import VisitTracker

__all__ = ["BaseTracker", "VisitTracker"]
