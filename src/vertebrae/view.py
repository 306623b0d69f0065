"""Content container: the element controllers are attached to.

A minimal in-memory stand-in for the page element the app owns: an
ordered class list, an optional id, and child content. Controllers
receive it through ``setup_view_properties`` and fill ``children``.
"""

import re
from typing import Any

_CLASS_SEPARATORS = re.compile(r"[\s_]+")


def css_class_name(name: str) -> str:
    """Turn a controller display name into a CSS class.

    Whitespace and underscore runs collapse into a single hyphen::

        css_class_name("My Page_View")  # "my-page-view"
    """
    return _CLASS_SEPARATORS.sub("-", name.strip()).lower()


class Container:
    """An element with classes, an id, and children."""

    __slots__ = ("children", "classes", "id")

    def __init__(
        self,
        *,
        classes: tuple[str, ...] | list[str] = (),
        id: str | None = None,  # noqa: A002
    ) -> None:
        self.classes: list[str] = []
        self.id: str | None = id
        self.children: list[Any] = []
        self.add_class(*classes)

    def __repr__(self) -> str:
        return f"Container(classes={self.classes!r}, id={self.id!r}, children={len(self.children)})"

    @property
    def class_name(self) -> str:
        """The space-joined class attribute."""
        return " ".join(self.classes)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def add_class(self, *names: str) -> None:
        """Add classes, skipping empty names and duplicates."""
        for name in names:
            for part in name.split():
                if part not in self.classes:
                    self.classes.append(part)

    def remove_class(self, *names: str) -> None:
        """Remove the given classes, or every class when called bare."""
        if not names:
            self.classes.clear()
            return
        self.classes = [c for c in self.classes if c not in names]

    def append(self, child: Any) -> None:
        self.children.append(child)

    def empty(self) -> None:
        self.children.clear()
