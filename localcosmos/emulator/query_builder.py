"""
Query builder.

Builds parameterized SqlQuerySpecs in the grouped-AND form the emulator
evaluates, e.g.:

    Query().where_condition("score", ">=", 5).where_condition("title", "CONTAINS", "match").build(1)
    -> SELECT TOP 1 * FROM c WHERE (c.score >= @score) AND (CONTAINS(c.title, @title, true))

Author: LocalCosmos Team
Date: 2026-10-17
"""

from typing import Any, Dict, List, Optional, Tuple

from .models import SqlParameter, SqlQuerySpec

Clause = Tuple[str, Dict[str, Any]]

OPERATORS = ("=", "<", "<=", ">", ">=", "CONTAINS")


class Query:
    """Accumulates WHERE clauses and their parameters."""

    def __init__(self) -> None:
        self._clauses: List[str] = []
        self._parameters: Dict[str, Any] = {}

    @staticmethod
    def condition(field: str, op: str, value: Any) -> Clause:
        """Build one clause with a parameter named after the field.

        Args:
            field: Dotted field path (without the "c." prefix)
            op: Comparison operator or "CONTAINS"
            value: Value bound to the generated parameter

        Returns:
            (clause, {parameter_name: value})

        Raises:
            ValueError: If the operator is not supported
        """
        if op not in OPERATORS:
            raise ValueError(f"Unsupported operator: {op}. Must be one of {list(OPERATORS)}")

        param = "@" + field.replace(".", "_")
        if op == "CONTAINS":
            clause = f"CONTAINS(c.{field}, {param}, true)"
        else:
            clause = f"c.{field} {op} {param}"
        return clause, {param: value}

    def where(self, clause: Tuple[Any, ...]) -> "Query":
        """Add a raw clause, optionally with parameters.

        Args:
            clause: (clause_text,) or (clause_text, {name: value})

        Returns:
            self, for chaining
        """
        text = clause[0]
        params = clause[1] if len(clause) > 1 and clause[1] else {}
        self._clauses.append(text)
        for name, value in params.items():
            # First binding of a name wins
            self._parameters.setdefault(name, value)
        return self

    def where_condition(self, field: str, op: str, value: Any) -> "Query":
        """Add a clause built by condition()."""
        return self.where(self.condition(field, op, value))

    def build(self, max_items: Optional[int] = None) -> SqlQuerySpec:
        """Build the query spec.

        Args:
            max_items: Optional TOP limit; must be positive

        Returns:
            SqlQuerySpec

        Raises:
            ValueError: If max_items is not positive
        """
        if max_items is not None and max_items <= 0:
            raise ValueError(f"max_items must be positive: {max_items}")

        top = f"TOP {max_items} " if max_items is not None else ""
        where = ""
        if self._clauses:
            where = "WHERE " + " AND ".join(f"({clause})" for clause in self._clauses)

        return SqlQuerySpec(
            query=f"SELECT {top}* FROM c {where}",
            parameters=[
                SqlParameter(name=name, value=value)
                for name, value in self._parameters.items()
            ]
        )
