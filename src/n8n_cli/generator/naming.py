"""Turn OpenAPI identifiers into command-line tokens.

Every resource name, operation name, and flag in the command tree goes
through :func:`to_flag_token`, so the generated surface only ever contains
lowercase, hyphen-separated words::

    >>> to_flag_token("getWorkflows")
    'get-workflows'
    >>> to_flag_token("include_data")
    'include-data'
    >>> to_flag_token("Source Control")
    'source-control'
"""

from __future__ import annotations

_SEPARATORS = frozenset("-_ ")


def to_flag_token(identifier: str) -> str:
    """Normalise *identifier* into a kebab-case token.

    Rules, applied in a single left-to-right pass:

    1. ASCII uppercase letters are lowercased; a hyphen is inserted when the
       previous character was a lowercase letter or a digit (``fooBar`` ->
       ``foo-bar``, ``v2Beta`` -> ``v2-beta``).  Runs of capitals stay
       together (``XMLParser`` -> ``xmlparser``).
    2. ``_``, space, and ``-`` are separators; a run of separators becomes a
       single hyphen.
    3. Leading and trailing hyphens are trimmed.

    The transform is idempotent: ``to_flag_token(to_flag_token(x)) ==
    to_flag_token(x)``.

    Args:
        identifier: An operation id, tag, parameter, or property name.

    Returns:
        The normalised token.  May be empty when *identifier* contains only
        separators.
    """
    out: list[str] = []
    prev_lower = False

    for ch in identifier:
        if ch in _SEPARATORS:
            if out and out[-1] != "-":
                out.append("-")
            prev_lower = False
            continue

        if ch.isascii() and ch.isupper():
            if prev_lower:
                out.append("-")
            out.append(ch.lower())
            prev_lower = False
            continue

        out.append(ch)
        prev_lower = ch.isascii() and (ch.islower() or ch.isdigit())

    return "".join(out).strip("-")
