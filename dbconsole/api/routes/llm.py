"""
LLM Routes - natural-language-to-SQL generation.

Stateless: the client sends the schema it already browsed, so no
session or database access is involved.
"""
from fastapi import APIRouter, Depends

from dbconsole.api.dependencies import get_sql_generator
from dbconsole.core.logging_config import get_logger
from dbconsole.llm import SQLGenerator
from dbconsole.models.console import GenerateSQLRequest, GenerateSQLResponse

logger = get_logger(__name__)
router = APIRouter(prefix="/llm", tags=["LLM"])


@router.post(
    "/generate",
    response_model=GenerateSQLResponse,
    summary="Generate SQL",
    description="Generate a query in the given dialect using only the listed tables.",
)
def generate_sql(
    request: GenerateSQLRequest,
    generator: SQLGenerator = Depends(get_sql_generator),
) -> GenerateSQLResponse:
    schema = [table.to_schema() for table in request.schema_]
    sql = generator.generate_sql(request.description, schema, request.database_type)
    return GenerateSQLResponse(
        query=sql,
        explanation=f'Generated {request.database_type} query based on: "{request.description}"',
    )
