from .base import BaseGenerator
from .generator import DEFAULT_CODE_LENGTH, Generator

__all__ = ["BaseGenerator", "Generator", "DEFAULT_CODE_LENGTH"]
