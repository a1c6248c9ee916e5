from .async_writer import AsyncWriter
from .command import CommandTraceLogger

__all__ = ["AsyncWriter", "CommandTraceLogger"]
