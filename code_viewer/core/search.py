# code_viewer/core/search.py

from typing import Iterable, List

from .snippet_loader import Snippet

# The snippet fields a query is matched against.
SEARCHABLE_FIELDS = ("title", "description", "id", "code")


def normalize_query(query: str) -> str:
    """Lower-cases and trims a raw query so it can be compared directly."""
    return (query or "").strip().lower()


def matches(snippet: Snippet, query: str) -> bool:
    """
    Checks whether a snippet matches a query.

    Matching is a case-insensitive substring test against the title,
    description, id and code. An empty (or whitespace-only) query matches
    every snippet.
    """
    needle = normalize_query(query)
    if not needle:
        return True
    return any(needle in getattr(snippet, field).lower() for field in SEARCHABLE_FIELDS)


def filter_snippets(snippets: Iterable[Snippet], query: str) -> List[Snippet]:
    """Returns the matching snippets in their original order."""
    return [snippet for snippet in snippets if matches(snippet, query)]
