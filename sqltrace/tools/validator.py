"""SQL checks that run before a query is sent to the database."""

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from ..core.errors import InvalidQueryError, QuerySyntaxError


# Statement types that change data or schema
FORBIDDEN_EXPRESSIONS = (
    exp.Insert,
    exp.Update,
    exp.Delete,
    exp.Drop,
    exp.Create,
    exp.Alter,
    exp.Merge,
    exp.TruncateTable,
)

READ_ONLY_ROOTS = (exp.Select, exp.Union, exp.Intersect, exp.Except)


def validate_query_syntax(query: str) -> exp.Expression:
    """Parse `query` with the postgres dialect and return the expression.

    Raises QuerySyntaxError for empty input, unparsable SQL and
    multi-statement input.
    """
    if not query or not query.strip():
        raise QuerySyntaxError("Query is empty")

    try:
        statements = [s for s in sqlglot.parse(query, read="postgres") if s is not None]
    except (ParseError, TokenError) as e:
        raise QuerySyntaxError(f"Failed to parse SQL: {e}") from e

    if not statements:
        raise QuerySyntaxError("Query is empty")
    if len(statements) > 1:
        raise QuerySyntaxError("Only a single statement can be explained")
    return statements[0]


def ensure_read_only(query: str) -> exp.Expression:
    """Reject anything that is not a plain SELECT (UNION and WITH included)."""
    parsed = validate_query_syntax(query)

    if not isinstance(parsed, READ_ONLY_ROOTS):
        raise InvalidQueryError("Only SELECT queries are supported for explanation")

    for node in parsed.walk():
        if isinstance(node, FORBIDDEN_EXPRESSIONS):
            raise InvalidQueryError(
                f"Query contains forbidden statement: {node.key.upper()}"
            )
    return parsed
