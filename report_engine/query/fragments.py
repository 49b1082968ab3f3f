"""Accumulator for the pieces of one SELECT statement."""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Union


@dataclass
class CompileStats:
    """Counters collected while compiling one definition."""

    unmapped_fields: List[str] = field(default_factory=list)
    dropped_fields: List[str] = field(default_factory=list)


class QueryFragmentSet:
    """
    Ordered SELECT expressions, FROM/JOIN clauses, GROUP BY keys, WHERE
    predicates and CTE bodies of one query branch.

    Joins are keyed: ``ensure_join`` adds a join the first time its key is seen
    and ignores later requests for the same key.
    """

    def __init__(self):
        self.select: List[str] = []
        self.aliases: List[str] = []
        self.from_: List[str] = []
        self.group_by: List[str] = []
        self.where: List[str] = []
        self.ctes: Dict[str, str] = {}
        self.join_keys: set = set()

    # ===== SELECT =====

    def add_select(self, expr: str, alias: str) -> None:
        self.select.append(f"{expr} AS {alias}")
        self.aliases.append(alias)

    # ===== FROM / JOIN =====

    def add_from(self, clause: str) -> None:
        self.from_.append(clause)

    def ensure_join(self, key: str, builder: Callable[[], Union[str, Iterable[str]]]) -> bool:
        """Add the join(s) produced by ``builder`` unless ``key`` is already joined."""
        if key in self.join_keys:
            return False
        self.join_keys.add(key)
        clauses = builder()
        if isinstance(clauses, str):
            clauses = [clauses]
        self.from_.extend(clauses)
        return True

    def has_join(self, key: str) -> bool:
        return key in self.join_keys

    # ===== GROUP BY / WHERE / CTE =====

    def add_group_by(self, *keys: str) -> None:
        for key in keys:
            if key not in self.group_by:
                self.group_by.append(key)

    def add_where(self, predicate: str) -> None:
        """Append a predicate; ``predicate`` starts with its own ``AND``/``OR``."""
        if predicate:
            self.where.append(predicate)

    def add_cte(self, name: str, body: str) -> None:
        if name not in self.ctes:
            self.ctes[name] = body

    # ===== RENDERING =====

    def render_ctes(self) -> str:
        if not self.ctes:
            return ""
        return "WITH " + ", ".join(f"{name} AS ({body})" for name, body in self.ctes.items()) + " "

    def render(self) -> str:
        """Render ``SELECT ... FROM ... WHERE TRUE ... [GROUP BY ...]`` without CTEs."""
        sql = "SELECT " + ", ".join(self.select) + " FROM " + " ".join(self.from_)
        sql += " WHERE TRUE" + "".join(f" {predicate.strip()}" for predicate in self.where)
        if self.group_by:
            sql += " GROUP BY " + ", ".join(self.group_by)
        return sql
