"""Date-option predicates."""

from typing import List, Optional, Sequence, Tuple

from report_engine.catalog.enums import DateConditions, DateOperator
from report_engine.query.dialects import SqlDialect
from report_engine.reports.schemas import DateOption

RELATIVE = "relative"
RANGE = "range"


def is_active(option: Optional[DateOption]) -> bool:
    """True when ``option`` restricts rows."""
    if option is None or option.any:
        return False
    return option.type in (RELATIVE, RANGE)


def build_date_filter(dialect: SqlDialect, column: str, option: Optional[DateOption]) -> str:
    """
    Predicate for one date option against ``column``, without a leading AND.

    Relative options count days back from today (``expiringIn`` counts forward).
    Ranges include both ends, ``to`` up to the last second of the day.
    Returns an empty string for ``any`` or an incomplete option.
    """
    if not is_active(option):
        return ""

    if option.type == RANGE or option.operator == DateOperator.RANGE.value:
        parts = []
        if option.from_:
            parts.append(f"{column} >= {dialect.timestamp_literal(option.from_[:10] + ' 00:00:00')}")
        if option.to:
            parts.append(f"{column} <= {dialect.timestamp_literal(option.to[:10] + ' 23:59:59')}")
        return " AND ".join(parts)

    days = int(option.days or 0)
    operator = option.operator
    if operator == DateOperator.IS_AFTER.value:
        return f"{column} >= {dialect.days_offset(-days)}"
    if operator == DateOperator.IS_BEFORE.value:
        return f"{column} < {dialect.days_offset(-days)}"
    if operator == DateOperator.IS_EQUAL.value:
        return (
            f"{column} >= {dialect.days_offset(-days)}"
            f" AND {column} < {dialect.days_offset(-days + 1)}"
        )
    if operator == DateOperator.EXPIRING_IN.value:
        return f"{column} >= {dialect.current_date()} AND {column} <= {dialect.days_offset(days)}"
    return ""


def date_options_predicate(
    dialect: SqlDialect,
    conditions: DateConditions,
    pairs: Sequence[Tuple[str, Optional[DateOption]]],
) -> str:
    """
    Combine several (column, option) filters into one parenthesised predicate.

    Filters are ANDed for ``allConditions`` and ORed for ``atLeastOneCondition``.
    """
    predicates: List[str] = []
    for column, option in pairs:
        predicate = build_date_filter(dialect, column, option)
        if predicate:
            predicates.append(f"({predicate})")
    if not predicates:
        return ""
    joiner = " AND " if DateConditions(conditions) == DateConditions.ALL else " OR "
    return "(" + joiner.join(predicates) + ")"


def compose_date_options(
    dialect: SqlDialect,
    conditions: DateConditions,
    pairs: Sequence[Tuple[str, Optional[DateOption]]],
) -> str:
    """`` AND (...)`` form of ``date_options_predicate``, or an empty string."""
    predicate = date_options_predicate(dialect, conditions, pairs)
    return f" AND {predicate}" if predicate else ""
