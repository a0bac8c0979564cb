"""
AI service package for turning document text into tables.

This package is split into:
- prompts: The instruction template sent with every request
- inference: The inference client protocol and its OpenAI implementation
- parsing: Location and validation of the JSON table in the reply
"""

from .inference import OpenAIInferenceClient, StructureInferenceClient
from .parsing import ResponseParser, find_json_object
from .prompts import TABLE_SYSTEM_PROMPT

__all__ = [
    "OpenAIInferenceClient",
    "ResponseParser",
    "StructureInferenceClient",
    "TABLE_SYSTEM_PROMPT",
    "find_json_object",
]
