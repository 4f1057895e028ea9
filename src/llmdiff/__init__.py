"""llmdiff: apply LLM-authored file operations to a workspace, task by task."""

__version__ = "0.3.0"
