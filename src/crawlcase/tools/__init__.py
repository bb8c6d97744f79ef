"""Tool abstractions and the Firecrawl tool set."""

from .base import BaseTool, ToolMetadata, format_validation_error, trim_response_text
from .registry import ToolRegistry

__all__ = ["BaseTool", "ToolMetadata", "ToolRegistry", "format_validation_error", "trim_response_text"]
