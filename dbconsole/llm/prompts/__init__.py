"""
Prompts module - LLM prompt templates.

Prompts are stored as separate Python files so prompt changes are
reviewed like code.
"""
from dbconsole.llm.prompts.sql_prompts import (
    CANNOT_GENERATE_MARKER,
    SQL_SYSTEM_PROMPT,
    build_schema_ddl,
    get_sql_generation_prompt,
)

__all__ = [
    "CANNOT_GENERATE_MARKER",
    "SQL_SYSTEM_PROMPT",
    "build_schema_ddl",
    "get_sql_generation_prompt",
]
