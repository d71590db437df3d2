from __future__ import annotations

import uuid

DEFAULT_NAME_PREFIX = "test_"


def generate_database_name(prefix: str = DEFAULT_NAME_PREFIX) -> str:
    """Return a database name carrying a fresh 128-bit random token.

    The token is a uuid4 rendered as 32 lowercase hex characters, so the name
    stays a valid unquoted identifier for the default prefix.
    """
    return f"{prefix}{uuid.uuid4().hex}"


def quote_ident(name: str) -> str:
    # postgres identifier: wrap in double quotes, double any embedded quote
    return '"' + name.replace('"', '""') + '"'


__all__ = ["DEFAULT_NAME_PREFIX", "generate_database_name", "quote_ident"]
