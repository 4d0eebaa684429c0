"""Output sinks for proof events."""

from income_proof.sinks.console import ConsoleSink
from income_proof.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink"]
