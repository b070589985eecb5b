"""
WHERE Predicate Evaluator.

Compiles WHERE fragments into condition objects and evaluates them
against documents. Two fragment shapes are supported:

    CONTAINS(c.<path>, <operand>, true)
    c.<path> <op> <operand>        op: =, <, <=, >, >=

Operands are named parameters (@name), quoted strings, true/false/null
or numeric literals.

Author: LocalCosmos Team
Date: 2026-10-17
"""

import operator
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from .exceptions import MissingParameterError, UnsupportedConditionError
from .paths import is_number, json_equals, resolve_path
from .query import ParsedQuery, QueryKind

_CONTAINS_RE = re.compile(
    r"""^CONTAINS\(\s*c\.([\w.]+)\s*,\s*(@\w+|".*?"|'.*?')\s*,\s*true\s*\)$""",
    re.IGNORECASE
)
_COMPARISON_RE = re.compile(
    r"""^c\.([\w.]+)\s*(<=|>=|=|<|>)\s*(@\w+|".*?"|'.*?'|-?\d+(?:\.\d+)?|true|false|null)$""",
    re.IGNORECASE
)

_ORDERING: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def resolve_operand(token: str, parameters: Dict[str, Any]) -> Any:
    """Resolve an operand token to a value.

    Args:
        token: Operand text as written in the query
        parameters: Parameter values by name

    Returns:
        Resolved value

    Raises:
        MissingParameterError: If a parameter is not supplied
    """
    if token.startswith("@"):
        if token not in parameters:
            raise MissingParameterError(token)
        return parameters[token]

    if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
        return token[1:-1]

    lowered = token.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None

    if "." in token:
        return float(token)
    return int(token)


class Condition(ABC):
    """A compiled WHERE fragment."""

    @abstractmethod
    def matches(self, document: Dict[str, Any]) -> bool:
        """True when the document satisfies the fragment."""


@dataclass
class ContainsCondition(Condition):
    """Case-insensitive substring test on a string field."""

    path: str
    value: Any

    def matches(self, document: Dict[str, Any]) -> bool:
        field_value = resolve_path(document, self.path)
        if not isinstance(field_value, str) or not isinstance(self.value, str):
            return False
        return self.value.lower() in field_value.lower()


@dataclass
class ComparisonCondition(Condition):
    """Equality or numeric ordering comparison on a field."""

    path: str
    op: str
    value: Any

    def matches(self, document: Dict[str, Any]) -> bool:
        field_value = resolve_path(document, self.path)
        if self.op == "=":
            return json_equals(field_value, self.value)

        # Ordering only applies to numbers
        if not is_number(field_value) or not is_number(self.value):
            return False
        return _ORDERING[self.op](field_value, self.value)


def compile_condition(fragment: str, parameters: Dict[str, Any]) -> Condition:
    """Compile one WHERE fragment.

    Args:
        fragment: Condition text with grouping parentheses removed
        parameters: Parameter values by name

    Returns:
        Compiled condition

    Raises:
        UnsupportedConditionError: If the fragment has no supported shape
        MissingParameterError: If an operand names an unknown parameter
    """
    match = _CONTAINS_RE.match(fragment)
    if match:
        return ContainsCondition(
            path=match.group(1),
            value=resolve_operand(match.group(2), parameters)
        )

    match = _COMPARISON_RE.match(fragment)
    if not match:
        raise UnsupportedConditionError(fragment)

    return ComparisonCondition(
        path=match.group(1),
        op=match.group(2),
        value=resolve_operand(match.group(3), parameters)
    )


def filter_documents(
    documents: List[Dict[str, Any]],
    conditions: List[Condition]
) -> List[Dict[str, Any]]:
    """Keep documents that satisfy every condition."""
    if not conditions:
        return documents
    return [doc for doc in documents if all(c.matches(doc) for c in conditions)]


def execute_query(parsed_query: ParsedQuery, documents: List[Dict[str, Any]]) -> List[Any]:
    """Execute a parsed query on documents.

    Conditions are compiled before any document is visited, so grammar
    errors surface even when there is nothing to filter.

    Args:
        parsed_query: Parsed statement
        documents: Candidate documents (already scoped to a partition)

    Returns:
        Query results: documents, {"id": ...} projections or [count]
    """
    conditions = [
        compile_condition(fragment, parsed_query.parameters)
        for fragment in parsed_query.conditions
    ]
    results = filter_documents(documents, conditions)

    if parsed_query.kind == QueryKind.COUNT:
        return [len(results)]

    if parsed_query.kind == QueryKind.ID_PROJECTION:
        return [{"id": doc.get("id")} for doc in results]

    if parsed_query.top is not None:
        results = results[:parsed_query.top]
    return results
