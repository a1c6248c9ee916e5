# protocol/__init__.py

from .framer import FrameTemplate, LineFramer, LineRead, ReadStatus
from .collector import CollectionPolicy, Outcome, Response, ResponseCollector

__all__ = [
    "FrameTemplate", "LineFramer", "LineRead", "ReadStatus",
    "CollectionPolicy", "Outcome", "Response", "ResponseCollector"]
