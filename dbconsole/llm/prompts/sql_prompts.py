"""
SQL Generation Prompts - Prompts for natural-language-to-SQL.

The schema is rendered as CREATE TABLE blocks so the model sees the
exact table and column names it is allowed to use.
"""
from typing import List

from dbconsole.database.models import TableSchema

SQL_SYSTEM_PROMPT = (
    "You are an expert SQL developer. You generate accurate SQL queries based on "
    "provided database schemas. You never hallucinate table names or column names "
    "that are not provided in the schema."
)

CANNOT_GENERATE_MARKER = "-- ERROR: Cannot generate query with available tables"


def build_schema_ddl(schema: List[TableSchema]) -> str:
    """
    Render table schemas as CREATE TABLE statements.

    Args:
        schema: Tables to describe

    Returns:
        One CREATE TABLE block per table
    """
    blocks = []
    for table in schema:
        column_lines = []
        for column in table.columns:
            line = f"  {column.name} {column.type}"
            if column.primary_key:
                line += " PRIMARY KEY"
            if column.auto_increment:
                line += " AUTO_INCREMENT"
            if not column.nullable:
                line += " NOT NULL"
            if column.default is not None:
                line += f" DEFAULT {column.default}"
            column_lines.append(line)
        columns = "\n".join(column_lines)
        blocks.append(f"CREATE TABLE {table.name} (\n{columns}\n);")
    return "\n\n".join(blocks)


def get_sql_generation_prompt(description: str, schema: List[TableSchema], dialect: str) -> str:
    """
    Build the instruction prompt for SQL generation.

    Args:
        description: What the user wants, in plain language
        schema: Tables the query may use
        dialect: Engine name, e.g. "postgresql"

    Returns:
        Complete user prompt for the LLM
    """
    table_names = ", ".join(table.name for table in schema)

    return f"""You are an expert SQL developer. Generate a {dialect} query based on the user's request.

IMPORTANT: You must ONLY use the tables and columns provided in the schema below. Do NOT hallucinate or invent table names or column names that are not explicitly listed.

USER REQUEST: {description}

DATABASE SCHEMA ({dialect}):
{build_schema_ddl(schema)}

AVAILABLE TABLES: {table_names}

RULES:
1. ONLY use table names and column names that exist in the schema above
2. Use proper {dialect} SQL syntax
3. Include appropriate JOINs when working with multiple tables
4. Add LIMIT clause for SELECT queries (LIMIT 100)
5. Return ONLY the SQL query, no explanations or comments
6. If the request cannot be fulfilled with the available schema, return: {CANNOT_GENERATE_MARKER}

SQL Query:"""
