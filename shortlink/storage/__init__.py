from .base import BaseStorage
from .memory_storage import MemoryStorage
from .models import Link
from .storage_factory import get_storage

__all__ = ["BaseStorage", "MemoryStorage", "Link", "get_storage"]
