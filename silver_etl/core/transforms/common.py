"""
Column helpers shared by the entity transforms.
"""

from typing import Mapping

from pyspark.sql import Column
from pyspark.sql import functions as F


def normalize_code(column: Column | str, mapping: Mapping[str, str], default: str) -> Column:
    """
    Map a categorical code to its label.

    The raw value is trimmed and upper-cased before matching, so " s " and
    "S" are the same code. Anything not in ``mapping`` (including null)
    becomes ``default``.

    Args:
        column: Raw code column
        mapping: Upper-case code -> label
        default: Label for unknown or missing codes

    Returns:
        Column expression with the normalized label
    """
    if not mapping:
        raise ValueError("mapping must contain at least one code")

    key = F.upper(F.trim(F.col(column) if isinstance(column, str) else column))

    expr = None
    for code, label in mapping.items():
        condition = key == code.upper()
        expr = F.when(condition, label) if expr is None else expr.when(condition, label)

    return expr.otherwise(default)


def yyyymmdd_to_date(column: Column | str) -> Column:
    """
    Convert an integer date such as 20230115 into a DATE.

    The value must be positive and exactly eight digits long; anything else,
    or a day the calendar does not have (20230229), becomes null. The date is
    assembled from its digits rather than parsed, so the result does not
    depend on the session's ANSI mode or time parser policy.
    """
    value = F.col(column) if isinstance(column, str) else column

    year = F.floor(value / 10000).cast("int")
    month = (F.floor(value / 100) % 100).cast("int")
    day = (value % 100).cast("int")

    first_of_month = F.when(
        value.between(10000000, 99999999) & month.between(1, 12),
        F.make_date(year, month, F.lit(1)),
    )

    return F.when(
        day.between(1, F.dayofmonth(F.last_day(first_of_month))),
        F.make_date(year, month, day),
    )


def strip_prefix(column: str, prefix: str) -> Column:
    """Remove ``prefix`` from the start of a string column when present."""
    value = F.col(column)
    return F.when(
        value.startswith(prefix),
        value.substr(F.lit(len(prefix) + 1), F.length(value)),
    ).otherwise(value)
