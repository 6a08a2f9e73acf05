"""Core data models for specsuite."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

IGNORE_TAG = "specsuite.Ignore"


@dataclass(frozen=True)
class Tag:
    """A label attached to a test for inclusion/exclusion filtering."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tag name must not be empty")

    def __str__(self) -> str:
        return self.name


TagLike = Union[str, Tag]


def tag_names(tags: Iterable[TagLike] | None) -> frozenset[str]:
    """Normalize a collection of tags to a frozenset of tag names."""
    if tags is None:
        return frozenset()
    if isinstance(tags, (str, Tag)):
        tags = (tags,)
    names: set[str] = set()
    for tag in tags:
        if tag is None:
            raise ValueError("a test tag was None")
        name = str(tag)
        if not name:
            raise ValueError("a test tag was empty")
        names.add(name)
    return frozenset(names)


@dataclass(eq=False)
class Scope:
    """A description node in the test tree.

    The trunk has no parent. Children keep declaration order, which is the
    order tests are enumerated and executed in.
    """

    name: str
    parent: Scope | None = field(default=None, repr=False)
    kind: str = "describe"
    child_prefix: str | None = None
    children: list[Scope | TestEntry | InfoEntry] = field(default_factory=list, repr=False)

    @property
    def is_trunk(self) -> bool:
        return self.parent is None

    @property
    def depth(self) -> int:
        level = 0
        node = self.parent
        while node is not None:
            level += 1
            node = node.parent
        return level


@dataclass(frozen=True)
class TestEntry:
    """A registered test."""

    __test__: ClassVar[bool] = False

    scope: Scope = field(repr=False)
    spec_text: str
    name: str
    tags: frozenset[str] = frozenset()
    body: Callable[..., Any] | None = field(default=None, repr=False, compare=False)
    arity: int = 0

    @property
    def ignored(self) -> bool:
        return IGNORE_TAG in self.tags

    @property
    def depth(self) -> int:
        return self.scope.depth + 1


@dataclass(frozen=True)
class InfoEntry:
    """An informational message recorded while the suite was being constructed."""

    scope: Scope = field(repr=False)
    message: str

    @property
    def depth(self) -> int:
        return self.scope.depth + 1


@dataclass(frozen=True)
class Selection:
    """A test chosen to run, and whether it should be reported as ignored."""

    entry: TestEntry
    will_ignore: bool = False


@dataclass(frozen=True)
class Succeeded:
    status: ClassVar[str] = "succeeded"

    duration: float


@dataclass(frozen=True)
class Failed:
    status: ClassVar[str] = "failed"

    cause: BaseException
    duration: float
    message: str


@dataclass(frozen=True)
class Pending:
    status: ClassVar[str] = "pending"


@dataclass(frozen=True)
class Ignored:
    status: ClassVar[str] = "ignored"


Outcome = Union[Succeeded, Failed, Pending, Ignored]


@dataclass(frozen=True)
class NoArgTest:
    """A test body awaiting invocation by ``Suite.with_fixture``."""

    __test__: ClassVar[bool] = False

    name: str
    body: Callable[[], Any] = field(repr=False)
    config_map: Mapping[str, Any] = field(default_factory=dict, repr=False)

    def __call__(self) -> Any:
        return self.body()


@dataclass(frozen=True)
class OneArgTest:
    """A test body that needs a fixture passed in by ``Suite.with_fixture``."""

    __test__: ClassVar[bool] = False

    name: str
    body: Callable[[Any], Any] = field(repr=False)
    config_map: Mapping[str, Any] = field(default_factory=dict, repr=False)

    def __call__(self, fixture: Any) -> Any:
        return self.body(fixture)


@dataclass
class Summary:
    """Aggregate counts for a run."""

    succeeded: int = 0
    failed: int = 0
    ignored: int = 0
    pending: int = 0
    suites_completed: int = 0
    suites_aborted: int = 0

    @property
    def success(self) -> bool:
        return self.failed == 0 and self.suites_aborted == 0

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + self.ignored + self.pending
