"""Removal of usages that coincide with a definition.

A usage search for ``foo`` also matches the line where ``foo`` is defined.
Such usages are dropped so a reference listing does not report the same
location twice. Locations are compared by repository, file and line only;
column is not part of the key, so a usage sharing a line with any
definition is suppressed.
"""

from collections.abc import Iterable

from zoekt_mcp.core.types import ReferenceResult


def deduplicate_references(
    definitions: Iterable[ReferenceResult], usages: Iterable[ReferenceResult]
) -> list[ReferenceResult]:
    """Return the usages whose location matches no definition, in order."""
    definition_keys = {d.dedup_key for d in definitions}
    return [u for u in usages if u.dedup_key not in definition_keys]
