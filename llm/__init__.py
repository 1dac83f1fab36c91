"""Contract for the task-extraction model's responses."""

from llm.contract import AIResponse, ExtractedTask, parse_ai_response

__all__ = ["AIResponse", "ExtractedTask", "parse_ai_response"]
