"""
SQL dialects

The few places where target databases disagree on literal or identifier
syntax.
"""

import re
from dataclasses import dataclass
from typing import Dict, List

PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Words reserved by at least one supported dialect; names that match are
# always quoted
RESERVED_WORDS = frozenset("""
    add all alter and any as asc between by case check column constraint create
    cross current_date current_time current_timestamp current_user default delete
    desc distinct drop else end except exists false fetch for foreign from full
    grant group having in index inner insert intersect into is join key left like
    limit not null offset on or order outer primary references right rows select
    session_user set some table then to true union unique update user using values
    when where with
""".split())


@dataclass(frozen=True)
class SQLDialect:
    """Literal and identifier conventions of one target database"""
    name: str
    identifier_quote: str = '"'
    true_literal: str = "TRUE"
    false_literal: str = "FALSE"
    escape_backslash: bool = False

    def quote_identifier(self, name: str) -> str:
        """Quote an identifier, doubling embedded quote characters"""
        q = self.identifier_quote
        return f"{q}{name.replace(q, q + q)}{q}"

    def requires_quoting(self, name: str) -> bool:
        """Whether a name is only valid as a quoted identifier"""
        return not PLAIN_IDENTIFIER.match(name) or name.lower() in RESERVED_WORDS


DIALECTS: Dict[str, SQLDialect] = {
    "ansi": SQLDialect("ansi"),
    "postgres": SQLDialect("postgres"),
    "mysql": SQLDialect("mysql", identifier_quote="`", true_literal="1", false_literal="0", escape_backslash=True),
    "sqlite": SQLDialect("sqlite", true_literal="1", false_literal="0"),
}


def get_dialect(name: str) -> SQLDialect:
    """
    Look up a dialect by name

    Raises:
        ValueError: If the dialect is not supported
    """
    key = (name or "").strip().lower()
    if key not in DIALECTS:
        raise ValueError(f"Unsupported SQL dialect '{name}'. Available: {', '.join(DIALECTS)}")
    return DIALECTS[key]


def list_dialects() -> List[str]:
    return list(DIALECTS)
