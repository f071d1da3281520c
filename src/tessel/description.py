"""Identity and metadata for runnable units."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Description:
    """Immutable node describing a test or a group of tests.

    Attributes
    ----------
    display_name
        Human readable name, e.g. ``"increment(Count)"`` or ``"[1: fib(3)=2]"``.
    unique_id
        Identity used for equality and hashing. Defaults to the display name.
    children
        Ordered child descriptions; empty for tests.
    is_test
        True for a single runnable unit.
    class_name
        Name of the test class the unit belongs to, if any.
    method_name
        Name of the test method, for test descriptions.
    """

    display_name: str
    unique_id: Hashable = None
    children: tuple[Description, ...] = field(default=(), compare=False)
    is_test: bool = field(default=False, compare=False)
    class_name: str | None = field(default=None, compare=False)
    method_name: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.unique_id is None:
            object.__setattr__(self, "unique_id", self.display_name)
        object.__setattr__(self, "children", tuple(self.children))

    def __hash__(self) -> int:
        return hash(self.unique_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Description):
            return NotImplemented
        return self.unique_id == other.unique_id

    def __str__(self) -> str:
        return self.display_name

    @property
    def is_suite(self) -> bool:
        return not self.is_test

    @property
    def is_empty(self) -> bool:
        return self.test_count == 0

    @property
    def test_count(self) -> int:
        """Number of runnable units under this node."""
        if self.is_test:
            return 1
        return sum(child.test_count for child in self.children)

    def with_children(self, children: Iterable[Description]) -> Description:
        """Copy of this description holding ``children`` instead."""
        return Description(
            display_name=self.display_name,
            unique_id=self.unique_id,
            children=tuple(children),
            is_test=self.is_test,
            class_name=self.class_name,
            method_name=self.method_name,
        )

    @classmethod
    def create_suite_description(
        cls,
        name: str,
        children: Iterable[Description] = (),
        *,
        unique_id: Hashable = None,
        class_name: str | None = None,
    ) -> Description:
        if not name:
            raise ValueError("name must have a length > 0")
        return cls(name, unique_id, tuple(children), False, class_name)

    @classmethod
    def create_test_description(
        cls,
        class_name: str,
        name: str,
        *,
        unique_id: Hashable = None,
    ) -> Description:
        return cls(
            f"{name}({class_name})",
            unique_id,
            (),
            True,
            class_name,
            name,
        )


EMPTY = Description.create_suite_description("No Tests")
