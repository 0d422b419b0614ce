"""
SQL Generator - natural language to SQL text.

Sibling feature of the session store: it reads schemas the console has
already fetched and never touches a database itself.
"""
import re
from typing import List, Optional

from dbconsole.core.exceptions import SQLGenerationError
from dbconsole.core.logging_config import get_logger
from dbconsole.database.models import TableSchema
from dbconsole.llm.client import LLMClient
from dbconsole.llm.prompts import SQL_SYSTEM_PROMPT, get_sql_generation_prompt

logger = get_logger(__name__)

_OPENING_FENCE = re.compile(r"^```(?:sql)?\s*", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\s*```$")

_STATEMENT_KINDS = {
    "select": "retrieves data from",
    "insert": "adds new data to",
    "update": "modifies existing data in",
    "delete": "removes data from",
}


def strip_sql_fences(text: str) -> str:
    """Remove markdown code fences the model wraps around SQL."""
    cleaned = _OPENING_FENCE.sub("", text.strip())
    return _CLOSING_FENCE.sub("", cleaned).strip()


def explain_query(sql: str, dialect: str) -> str:
    """One-line description of what kind of statement this is."""
    lowered = sql.strip().lower()
    for keyword, action in _STATEMENT_KINDS.items():
        if lowered.startswith(keyword):
            return f"This is a {keyword.upper()} query for {dialect} that {action} the database."
    return f"This is a {dialect} database query."


class SQLGenerator:
    """
    Turns a description plus schema into SQL text.

    Example:
        >>> generator = SQLGenerator()
        >>> generator.generate_sql("ten newest orders", schemas, "postgresql")
        'SELECT * FROM orders ORDER BY created_at DESC LIMIT 10'
    """

    def __init__(self, llm: Optional[LLMClient] = None):
        self.llm = llm or LLMClient()

    def generate_sql(self, description: str, schema: List[TableSchema], dialect: str) -> str:
        """
        Generate SQL for the description.

        Raises:
            LLMError: If every LLM provider failed
            SQLGenerationError: If the model answered with nothing usable
        """
        prompt = get_sql_generation_prompt(description, schema, dialect)
        logger.info(f"Generating {dialect} SQL over {len(schema)} table(s): {description[:50]}...")

        raw = self.llm.generate(prompt, system_prompt=SQL_SYSTEM_PROMPT)
        sql = strip_sql_fences(raw or "")
        if not sql:
            raise SQLGenerationError("No query generated")

        logger.debug(f"Generated SQL: {sql[:200]}")
        return sql
