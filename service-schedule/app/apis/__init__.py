from .events import EventsAPI

__all__ = ["EventsAPI"]
