from .command_sink import CommandEvent, CommandSink
from .input_source import InputSource
from .output_sink import OutputSink

__all__ = ["CommandEvent", "CommandSink", "InputSource", "OutputSink"]
