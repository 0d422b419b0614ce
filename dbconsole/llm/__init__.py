"""
LLM module - Language model integration.

This module handles all LLM interactions:
- Prompt construction from table schemas
- API calls to Google Gemini and Groq
- Response cleanup
"""
from dbconsole.llm.client import LLMClient
from dbconsole.llm.sql_generator import SQLGenerator, explain_query, strip_sql_fences

__all__ = [
    "LLMClient",
    "SQLGenerator",
    "explain_query",
    "strip_sql_fences",
]
