from .service import LinkService

__all__ = ["LinkService"]
