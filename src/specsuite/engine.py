"""Test registration engine.

Registration calls made while a suite is constructed go through a single
``RegistrationEngine``. Every change builds a new ``RegistryState`` and swaps
it into the engine's ``StateCell``; a swap against a stale snapshot raises
``ConcurrentModificationError`` instead of silently dropping registrations.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from specsuite.errors import (
    ConcurrentModificationError,
    DuplicateTestNameError,
    InvalidArgumentError,
    NotAllowedError,
    RegistrationClosedError,
)
from specsuite.informers import Informer, RegistrationInformer
from specsuite.models import IGNORE_TAG, InfoEntry, Scope, TagLike, TestEntry, tag_names
from specsuite.names import resolve
from specsuite.registry import RegistryState, StateCell

if TYPE_CHECKING:
    from specsuite.shared import SharedBehavior

logger = logging.getLogger(__name__)


def body_arity(body: Callable[..., Any] | None) -> int:
    """Return 1 if ``body`` needs a fixture argument, else 0."""
    if body is None:
        return 0
    try:
        signature = inspect.signature(body)
    except (TypeError, ValueError):
        return 0
    required = [
        p for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        and p.default is p.empty
    ]
    if len(required) > 1:
        raise InvalidArgumentError(
            f"test body {body!r} takes {len(required)} arguments; expected 0 or 1"
        )
    return len(required)


class RegistrationEngine:
    """Collects scopes, tests and info leaves into an ordered tree."""

    def __init__(
        self,
        suite_name: str,
        non_nesting_kinds: Iterable[str] = (),
        trunk_prefix: str | None = None,
    ) -> None:
        self.suite_name = suite_name
        self.non_nesting_kinds = frozenset(non_nesting_kinds)
        trunk = Scope(name="", kind="trunk", child_prefix=trunk_prefix)
        self._cell: StateCell[RegistryState] = StateCell(RegistryState.initial(trunk))
        self._informer_cell: StateCell[Informer] = StateCell(
            RegistrationInformer(self.record_info), what="informer"
        )

    # -- state --------------------------------------------------------------

    @property
    def state(self) -> RegistryState:
        return self._cell.get()

    @property
    def trunk(self) -> Scope:
        return self.state.trunk

    @property
    def current_scope(self) -> Scope:
        return self.state.current_scope

    @property
    def registration_closed(self) -> bool:
        return self.state.registration_closed

    @property
    def test_names(self) -> list[str]:
        return self.state.test_names

    @property
    def tags(self) -> dict[str, frozenset[str]]:
        return dict(self.state.tags_by_name)

    def check_open(self, what: str) -> None:
        if self.registration_closed:
            raise RegistrationClosedError(
                f"{what} cannot be registered on {self.suite_name} once it has "
                "started running (was it declared inside a test?)"
            )

    def _attach(
        self,
        scope: Scope,
        node: Scope | TestEntry | InfoEntry,
        old_state: RegistryState,
        new_state: RegistryState,
    ) -> None:
        """Add ``node`` to the tree and publish ``new_state``, or neither."""
        scope.children.append(node)
        try:
            self._cell.swap(old_state, new_state)
        except ConcurrentModificationError:
            for index, child in enumerate(scope.children):
                if child is node:
                    del scope.children[index]
                    break
            raise

    # -- scopes -------------------------------------------------------------

    def enter_scope(
        self,
        name: str,
        body: Callable[[], Any],
        kind: str = "describe",
        child_prefix: str | None = None,
    ) -> Scope:
        """Open a nested scope, run ``body`` inside it, then restore the previous scope."""
        self.check_open(f"A {kind} clause")
        if name is None:
            raise InvalidArgumentError("scope name was None")

        old_state = self.state
        parent = old_state.current_scope
        if kind in self.non_nesting_kinds:
            node: Scope | None = parent
            while node is not None:
                if node.kind == kind:
                    raise NotAllowedError(f"{kind} clauses cannot be nested")
                node = node.parent

        scope = Scope(name=name, parent=parent, kind=kind, child_prefix=child_prefix)
        self._attach(parent, scope, old_state, old_state.with_current_scope(scope))

        try:
            body()
        finally:
            state = self.state
            self._cell.swap(state, state.with_current_scope(parent))
        return scope

    def open_flat_scope(
        self, name: str, kind: str = "behavior", child_prefix: str | None = None
    ) -> Scope:
        """Start a new scope directly under the trunk and make it current.

        Used by styles that don't nest: every following test lands in this
        scope until the next flat scope is opened.
        """
        self.check_open(f"A {kind} clause")
        old_state = self.state
        trunk = old_state.trunk
        scope = Scope(name=name, parent=trunk, kind=kind, child_prefix=child_prefix)
        self._attach(trunk, scope, old_state, old_state.with_current_scope(scope))
        return scope

    # -- tests --------------------------------------------------------------

    def register_test(
        self,
        spec_text: str,
        tags: Iterable[TagLike] | None = None,
        body: Callable[..., Any] | None = None,
    ) -> str:
        """Register a test under the current scope and return its resolved name."""
        self.check_open("A test")
        names = tag_names(tags)
        arity = body_arity(body)

        old_state = self.state
        scope = old_state.current_scope
        test_name = resolve(scope, spec_text)
        if test_name in old_state:
            raise DuplicateTestNameError(test_name)

        entry = TestEntry(
            scope=scope,
            spec_text=spec_text,
            name=test_name,
            tags=names,
            body=body,
            arity=arity,
        )
        self._attach(scope, entry, old_state, old_state.with_added_test(entry))
        return test_name

    def register_ignored_test(
        self,
        spec_text: str,
        tags: Iterable[TagLike] | None = None,
        body: Callable[..., Any] | None = None,
    ) -> str:
        """Register a test that is reported as ignored unless requested by name.

        The body is kept so a caller can still run it explicitly.
        """
        test_name = self.register_test(spec_text, None, body)

        old_state = self.state
        new_state = old_state.with_added_tag(test_name, tag_names(tags) | {IGNORE_TAG})
        registered = old_state.entry(test_name)
        updated = new_state.entry(test_name)
        if registered is None or updated is None:
            raise ConcurrentModificationError(
                f"Test {test_name!r} disappeared while it was being registered"
            )
        _replace_node(registered.scope, registered, updated)
        try:
            self._cell.swap(old_state, new_state)
        except ConcurrentModificationError:
            _replace_node(registered.scope, updated, registered)
            raise
        return test_name

    def register_shared_behavior(self, behavior: SharedBehavior) -> list[str]:
        """Splice a shared behavior's tests into the current scope.

        Names are resolved against the including scope, so the same behavior
        can be included from differently named scopes.
        """
        self.check_open("A shared behavior")
        registered: list[str] = []
        for shared in behavior.tests:
            if shared.ignored:
                registered.append(
                    self.register_ignored_test(shared.spec_text, shared.tags, shared.body)
                )
            else:
                registered.append(
                    self.register_test(shared.spec_text, shared.tags, shared.body)
                )
        return registered

    # -- info ---------------------------------------------------------------

    def record_info(self, message: str) -> None:
        """Add an info leaf to the current scope (construction-time ``info``)."""
        self.check_open("An info message")
        old_state = self.state
        scope = old_state.current_scope
        info = InfoEntry(scope=scope, message=message)
        self._attach(scope, info, old_state, old_state.with_current_scope(scope))

    @property
    def informer(self) -> Informer:
        return self._informer_cell.get()

    def install_informer(self, informer: Informer) -> Informer:
        """Make ``informer`` current and return the one it replaced."""
        previous = self._informer_cell.get()
        self._informer_cell.swap(previous, informer)
        return previous

    def restore_informer(self, expected: Informer, previous: Informer) -> None:
        """Put ``previous`` back, failing if ``expected`` is no longer current."""
        self._informer_cell.swap(expected, previous)

    # -- lifecycle ----------------------------------------------------------

    def close_registration(self) -> None:
        old_state = self.state
        if old_state.registration_closed:
            return
        self._cell.swap(old_state, old_state.with_closed_registration())
        logger.debug(
            "Registration closed for %s with %d test(s)",
            self.suite_name,
            len(old_state.entries),
        )


def _replace_node(scope: Scope, old: TestEntry, new: TestEntry) -> None:
    for index, child in enumerate(scope.children):
        if child is old:
            scope.children[index] = new
            return
