"""Query rewriting for Zoekt search modes.

Callers hand us free-form Zoekt queries. Symbol search needs the free-text
part wrapped in ``sym:`` while filter operators (``lang:``, ``repo:`` ...)
stay untouched; filename search needs a ``type:filename`` prefix. Both
rewrites are idempotent.
"""

SYMBOL_PREFIX = "sym:"
FILENAME_PREFIX = "type:filename"
FILENAME_PREFIX_ALIAS = "type:file"

# Zoekt filter operators preserved as-is when wrapping for symbol search
FILTER_OPERATORS = (
    "lang:",
    "language:",
    "repo:",
    "r:",
    "file:",
    "f:",
    "branch:",
    "b:",
    "case:",
    "c:",
    "content:",
    "sym:",
    "type:",
    "archived:",
)


def is_filter_token(token: str) -> bool:
    lowered = token.lower()
    return any(lowered.startswith(op) for op in FILTER_OPERATORS)


def wrap_symbol_query(query: str) -> str:
    """Rewrite a query so its free text is matched against symbol names.

    Examples:
        "handleRequest"              -> "sym:handleRequest"
        "handleRequest lang:go"      -> "sym:handleRequest lang:go"
        "lang:go"                    -> "sym:lang:go"
        "sym:handleRequest"          -> "sym:handleRequest"
    """
    trimmed = query.strip()
    if trimmed.startswith(SYMBOL_PREFIX):
        return trimmed

    filters: list[str] = []
    terms: list[str] = []
    for token in trimmed.split():
        if is_filter_token(token):
            filters.append(token)
        else:
            terms.append(token)

    if not terms:
        return f"{SYMBOL_PREFIX}{trimmed}"

    parts = [f"{SYMBOL_PREFIX}{' '.join(terms)}", *filters]
    return " ".join(parts)


def wrap_filename_query(query: str) -> str:
    """Restrict a query to file name matches."""
    trimmed = query.strip()
    # "type:file" is also a prefix of "type:filename"
    if trimmed.startswith(FILENAME_PREFIX_ALIAS):
        return trimmed
    return f"{FILENAME_PREFIX} {trimmed}".rstrip()


def build_reference_queries(symbol: str, filters: str | None = None) -> tuple[str, str]:
    """Definition and usage queries for a reference lookup.

    Returns:
        ``(definition_query, usage_query)``
    """
    symbol = symbol.strip()
    suffix = f" {filters.strip()}" if filters and filters.strip() else ""
    return f"{SYMBOL_PREFIX}{symbol}{suffix}", f"{symbol}{suffix}"


def reference_cursor_query(definition_query: str, usage_query: str) -> str:
    """Combined identity that reference cursors are bound to."""
    return f"{definition_query}|{usage_query}"
