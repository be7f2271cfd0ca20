"""rolechain — role chains over LLM backends with tool-call execution."""

__version__ = "0.1.0"
