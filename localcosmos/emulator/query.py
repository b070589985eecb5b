"""
SQL Query Parser.

Recognizes the narrow set of Cosmos DB SQL statement shapes the emulator
supports and splits WHERE clauses into AND-conjoined fragments:

    SELECT VALUE COUNT(1) FROM c [WHERE ...]
    SELECT c.id FROM c [WHERE ...]
    SELECT [TOP n] * FROM c [WHERE ...]

Any other statement raises UnsupportedQueryError.

Author: LocalCosmos Team
Date: 2026-10-17
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from .exceptions import BadRequestError, UnsupportedQueryError
from .models import SqlQuerySpec

QueryInput = Union[str, SqlQuerySpec, Mapping[str, Any]]

_COUNT_RE = re.compile(r"^SELECT\s+VALUE\s+COUNT\(1\)\s+FROM\s+c(?:\s+WHERE\s+.+)?$", re.IGNORECASE | re.DOTALL)
_ID_RE = re.compile(r"^SELECT\s+c\.id\s+FROM\s+c(?:\s+WHERE\s+.+)?$", re.IGNORECASE | re.DOTALL)
_STAR_RE = re.compile(r"^SELECT(?:\s+TOP\s+(\d+))?\s+\*\s+FROM\s+c(?:\s+WHERE\s+(.+))?$", re.IGNORECASE | re.DOTALL)
_WHERE_RE = re.compile(r"\s+WHERE\s+(.+)$", re.IGNORECASE | re.DOTALL)

_GROUPED_AND_RE = re.compile(r"\)\s+AND\s+\(", re.IGNORECASE)
_PLAIN_AND_RE = re.compile(r"\s+AND\s+", re.IGNORECASE)


class QueryKind(str, Enum):
    """Supported statement shapes."""
    COUNT = "count"
    ID_PROJECTION = "id_projection"
    STAR = "star"


@dataclass
class ParsedQuery:
    """Parsed query statement.

    Attributes:
        text: Original query text
        kind: Statement shape
        top: Result limit for TOP queries
        conditions: AND-conjoined WHERE fragments
        parameters: Parameter values by name (including "@")
    """

    text: str
    kind: QueryKind
    top: Optional[int] = None
    conditions: List[str] = field(default_factory=list)
    parameters: Dict[str, Any] = field(default_factory=dict)


def normalize_query_input(query: QueryInput) -> SqlQuerySpec:
    """Coerce a query string, mapping or SqlQuerySpec to a SqlQuerySpec.

    Raises:
        BadRequestError: If a mapping does not describe a valid query spec
    """
    if isinstance(query, SqlQuerySpec):
        return query
    if isinstance(query, str):
        return SqlQuerySpec(query=query)
    try:
        return SqlQuerySpec.model_validate(dict(query))
    except (TypeError, ValueError, ValidationError) as e:
        raise BadRequestError(f"Invalid query spec: {e}") from e


def split_where_conditions(where_clause: str) -> List[str]:
    """Split a WHERE clause into AND-conjoined fragments.

    Grouped clauses ("(a) AND (b)") split on ") AND (", anything else on
    plain " AND ". At most one leading "(" and one trailing ")" are
    stripped from each fragment.

    Args:
        where_clause: Text following the WHERE keyword

    Returns:
        Non-empty condition fragments
    """
    trimmed = where_clause.strip()
    if ") AND (" in trimmed:
        parts = _GROUPED_AND_RE.split(trimmed)
    else:
        parts = _PLAIN_AND_RE.split(trimmed)

    conditions = []
    for part in parts:
        part = part.strip()
        if part.startswith("("):
            part = part[1:]
        if part.endswith(")"):
            part = part[:-1]
        part = part.strip()
        if part:
            conditions.append(part)
    return conditions


def _where_conditions(statement: str) -> List[str]:
    match = _WHERE_RE.search(statement)
    if not match:
        return []
    return split_where_conditions(match.group(1))


def parse_query(query: QueryInput) -> ParsedQuery:
    """Parse a query into its statement shape and WHERE fragments.

    Args:
        query: Query string, mapping or SqlQuerySpec

    Returns:
        ParsedQuery

    Raises:
        UnsupportedQueryError: If the statement is not a supported shape
    """
    spec = normalize_query_input(query)
    parameters = {parameter.name: parameter.value for parameter in spec.parameters}
    statement = spec.query.strip()

    if _COUNT_RE.match(statement):
        return ParsedQuery(
            text=spec.query,
            kind=QueryKind.COUNT,
            conditions=_where_conditions(statement),
            parameters=parameters
        )

    if _ID_RE.match(statement):
        return ParsedQuery(
            text=spec.query,
            kind=QueryKind.ID_PROJECTION,
            conditions=_where_conditions(statement),
            parameters=parameters
        )

    match = _STAR_RE.match(statement)
    if not match:
        raise UnsupportedQueryError(spec.query)

    top = int(match.group(1)) if match.group(1) else None
    return ParsedQuery(
        text=spec.query,
        kind=QueryKind.STAR,
        top=top,
        conditions=_where_conditions(statement),
        parameters=parameters
    )
