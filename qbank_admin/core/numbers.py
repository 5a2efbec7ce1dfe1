import re
from typing import Any, Optional

# largest value a BIGINT column, LIMIT or OFFSET can bind
SQL_INT_MAX = 2**63 - 1

_INTEGER = re.compile(r"-?[0-9]+")


def parse_integer(raw: Any) -> Optional[int]:
    """Plain ASCII decimal (no underscores, no other digit scripts), else None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    return int(text) if _INTEGER.fullmatch(text) else None


def parse_int(raw: Any) -> Optional[int]:
    """Like ``parse_integer`` but also None outside the SQL integer range."""
    value = parse_integer(raw)
    if value is None or not -SQL_INT_MAX - 1 <= value <= SQL_INT_MAX:
        return None
    return value
