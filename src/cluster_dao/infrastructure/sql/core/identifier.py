"""
SQL identifier handling utilities.

Provides functions for quoting MySQL identifiers (table names, column names)
and for reducing field specs such as ``U.`us_no``` to their bare column name.
"""


def quote_identifier(name: str) -> str:
    """
    Quote a single identifier part with backticks.

    Examples:
        >>> quote_identifier("users")
        '`users`'
        >>> quote_identifier("col`name")
        '`col``name`'
    """
    # Escape backticks in MySQL
    escaped = name.replace("`", "``")
    return f"`{escaped}`"


def escape_identifier(name: str) -> str:
    """
    Escape a possibly qualified identifier.

    Each dot-separated part is quoted on its own, so ``users.name`` becomes
    ```users`.`name```.

    Examples:
        >>> escape_identifier("users.name")
        '`users`.`name`'
        >>> escape_identifier("name")
        '`name`'
    """
    return ".".join(quote_identifier(part) for part in str(name).split("."))


def bare_field_name(field: str) -> str:
    """
    Strip table qualifiers and backticks from a field spec.

    Examples:
        >>> bare_field_name("U.us_no")
        'us_no'
        >>> bare_field_name("`U`.`name`")
        'name'
        >>> bare_field_name("ctime")
        'ctime'
    """
    return field.replace("`", "").rsplit(".", 1)[-1]
