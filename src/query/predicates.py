"""
Wildcard translation and single-field predicate clauses
"""

from typing import Optional, Sequence, Tuple

from .models import Operator

WILDCARD = "*"
SWQL_WILDCARD = "%"

def translate_pattern(value: str, operator: Operator) -> Tuple[str, str]:
    """
    Map a user value onto a SWQL operator and literal.

    A value containing ``*`` switches to the LIKE family (``NOT LIKE`` for a
    negated base operator) with ``*`` rewritten as ``%``. Anything else keeps
    the base operator and the value as given.
    """
    if WILDCARD in value:
        like = "NOT LIKE" if operator.negated else "LIKE"
        return like, value.replace(WILDCARD, SWQL_WILDCARD)
    return operator.value, value

def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"

def build_clause(field: str, values: Sequence[str], operator: Operator) -> Optional[str]:
    """
    Render one parenthesized clause over ``field``.

    Returns None for an empty ``values`` so the caller can leave the
    dimension out entirely. Several values are OR-ed, except under a negated
    operator where they are AND-ed: "not A and not B".
    """
    if not values:
        return None

    terms = []
    for value in values:
        op, literal = translate_pattern(value, operator)
        terms.append(f"{field} {op} {quote_literal(literal)}")

    joiner = " AND " if operator.negated else " OR "
    return f"( {joiner.join(terms)} )"
