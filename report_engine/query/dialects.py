"""
SQL rendering primitives for the two supported query engines.

Field semantics are written once against these methods; only the rendering
differs between Athena and Snowflake.
"""

from typing import Dict, Type

from report_engine.catalog.enums import Dialect


class SqlDialect:
    """Base dialect. Every primitive a dialect does not provide raises NotImplementedError."""

    name: Dialect

    # ===== QUOTING =====

    def alias(self, text: str) -> str:
        """Quote ``text`` for use as a SELECT alias."""
        return '"' + str(text).replace('"', '""') + '"'

    def case_label(self, text: str) -> str:
        """Quote ``text`` as a string literal inside a CASE branch."""
        return "'" + str(text).replace("'", "''") + "'"

    def literal(self, text: str) -> str:
        return self.case_label(text)

    def col(self, alias: str, column: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def column_name(self, column: str) -> str:
        """Name a derived column so that ``col`` can reference it."""
        raise NotImplementedError("Method not implemented.")

    # ===== FUNCTIONS =====

    def any_value(self, expr: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def if_(self, condition: str, then: str, otherwise: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def now(self) -> str:
        raise NotImplementedError("Method not implemented.")

    def current_date(self) -> str:
        raise NotImplementedError("Method not implemented.")

    def cast_varchar(self, expr: str) -> str:
        return f"CAST({expr} AS varchar)"

    def datetime_format(self, expr: str, timezone: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def date_format(self, expr: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def json_scalar(self, expr: str, key: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def json_scalar_key(self, expr: str, key: str) -> str:
        """Like ``json_scalar`` for keys that are not plain identifiers."""
        raise NotImplementedError("Method not implemented.")

    def parse_datetime(self, expr: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def parse_date(self, expr: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def array_sort(self, expr: str) -> str:
        return f"ARRAY_SORT({expr})"

    def distinct_array_join(self, expr: str, separator: str = ", ") -> str:
        raise NotImplementedError("Method not implemented.")

    def days_left(self, expr: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def days_offset(self, days: int) -> str:
        raise NotImplementedError("Method not implemented.")

    def timestamp_literal(self, value: str) -> str:
        raise NotImplementedError("Method not implemented.")

    def true_flag(self) -> str:
        """Value of boolean-ish 0/1 columns such as ``core_user.valid``."""
        return "1"


class AthenaDialect(SqlDialect):
    """Presto/Trino syntax as accepted by Athena."""

    name = Dialect.ATHENA

    def col(self, alias: str, column: str) -> str:
        return f"{alias}.{column}"

    def column_name(self, column: str) -> str:
        return column

    def any_value(self, expr: str) -> str:
        return f"ARBITRARY({expr})"

    def if_(self, condition: str, then: str, otherwise: str) -> str:
        return f"IF({condition}, {then}, {otherwise})"

    def now(self) -> str:
        return "NOW()"

    def current_date(self) -> str:
        return "CURRENT_DATE"

    def datetime_format(self, expr: str, timezone: str) -> str:
        return f"DATE_FORMAT({expr} AT TIME ZONE '{timezone}', '%Y-%m-%d %H:%i:%s')"

    def date_format(self, expr: str) -> str:
        return f"DATE_FORMAT({expr}, '%Y-%m-%d')"

    def json_scalar(self, expr: str, key: str) -> str:
        return f"JSON_EXTRACT_SCALAR({expr}, '$.{key}')"

    def json_scalar_key(self, expr: str, key: str) -> str:
        return f"JSON_EXTRACT_SCALAR({expr}, '$[\"{key}\"]')"

    def parse_datetime(self, expr: str) -> str:
        return f"DATE_PARSE({expr}, '%Y-%m-%d %H:%i:%s')"

    def parse_date(self, expr: str) -> str:
        return f"DATE_PARSE({expr}, '%Y-%m-%d')"

    def distinct_array_join(self, expr: str, separator: str = ", ") -> str:
        return f"ARRAY_JOIN({self.array_sort(f'ARRAY_AGG(DISTINCT {expr})')}, '{separator}')"

    def days_left(self, expr: str) -> str:
        return f"DATE_DIFF('day', CURRENT_DATE, CAST({expr} AS DATE))"

    def days_offset(self, days: int) -> str:
        return f"DATE_ADD('day', {int(days)}, CURRENT_DATE)"

    def timestamp_literal(self, value: str) -> str:
        return f"TIMESTAMP '{value}'"


class SnowflakeDialect(SqlDialect):
    """Snowflake syntax; warehouse columns are lower-case quoted identifiers."""

    name = Dialect.SNOWFLAKE

    def col(self, alias: str, column: str) -> str:
        return f'{alias}."{column.lower()}"'

    def column_name(self, column: str) -> str:
        return f'"{column.lower()}"'

    def any_value(self, expr: str) -> str:
        return f"ANY_VALUE({expr})"

    def if_(self, condition: str, then: str, otherwise: str) -> str:
        return f"IFF({condition}, {then}, {otherwise})"

    def now(self) -> str:
        return "current_timestamp()"

    def current_date(self) -> str:
        return "CURRENT_DATE()"

    def datetime_format(self, expr: str, timezone: str) -> str:
        return f"TO_CHAR(CONVERT_TIMEZONE('{timezone}', {expr}), 'YYYY-MM-DD HH24:MI:SS')"

    def date_format(self, expr: str) -> str:
        return f"TO_CHAR({expr}, 'YYYY-MM-DD')"

    def json_scalar(self, expr: str, key: str) -> str:
        return f"JSON_EXTRACT_PATH_TEXT({expr}, '{key}')"

    def json_scalar_key(self, expr: str, key: str) -> str:
        return f"JSON_EXTRACT_PATH_TEXT({expr}, '\"{key}\"')"

    def parse_datetime(self, expr: str) -> str:
        return f"TO_TIMESTAMP({expr}, 'YYYY-MM-DD HH24:MI:SS')"

    def parse_date(self, expr: str) -> str:
        return f"TO_TIMESTAMP({expr}, 'YYYY-MM-DD')"

    def distinct_array_join(self, expr: str, separator: str = ", ") -> str:
        return f"ARRAY_TO_STRING({self.array_sort(f'ARRAY_AGG(DISTINCT {expr})')}, '{separator}')"

    def days_left(self, expr: str) -> str:
        return f"DATEDIFF(day, CURRENT_DATE(), {expr})"

    def days_offset(self, days: int) -> str:
        return f"DATEADD(day, {int(days)}, CURRENT_DATE())"

    def timestamp_literal(self, value: str) -> str:
        return f"TO_TIMESTAMP('{value}')"


DIALECTS: Dict[Dialect, Type[SqlDialect]] = {
    Dialect.ATHENA: AthenaDialect,
    Dialect.SNOWFLAKE: SnowflakeDialect,
}


def get_dialect(dialect: Dialect) -> SqlDialect:
    return DIALECTS[Dialect(dialect)]()
