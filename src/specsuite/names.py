"""Test name resolution from the scope nesting chain."""

from __future__ import annotations

from specsuite.errors import InvalidArgumentError
from specsuite.models import Scope


def scope_path(scope: Scope) -> list[Scope]:
    """Return the chain from the trunk down to ``scope``, outermost first."""
    path: list[Scope] = []
    node: Scope | None = scope
    while node is not None:
        path.append(node)
        node = node.parent
    path.reverse()
    return path


def scope_prefix(scope: Scope) -> str:
    """Return the text every test registered directly under ``scope`` starts with."""
    parts: list[str] = []
    for node in scope_path(scope):
        if node.name:
            parts.append(node.name)
        if node.child_prefix:
            parts.append(node.child_prefix)
    return " ".join(parts)


def resolve(scope: Scope, spec_text: str) -> str:
    """Compute the fully qualified name of a test declared in ``scope``.

    Ancestor names are joined outermost first with single spaces, each
    followed by its child prefix (e.g. ``should``) when it has one.
    """
    if spec_text is None or not str(spec_text).strip():
        raise InvalidArgumentError("spec text must be a non-empty string")
    prefix = scope_prefix(scope)
    return f"{prefix} {spec_text}".strip() if prefix else str(spec_text).strip()


def display_text(scope: Scope, text: str) -> str:
    """Text shown for a node in a report, including its parent's child prefix."""
    if scope.child_prefix:
        return f"{scope.child_prefix} {text}"
    return text
