"""BeautifulSoup helpers shared by the engine, the passes and the processor."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, cast

from bs4.element import Tag


LINE_CLASS = "line"


def gather_classes(value: Any) -> list[str]:
    """Return a list of classes extracted from a BeautifulSoup attribute."""
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
        return [cast(str, item) for item in value if isinstance(item, str)]
    return []


def has_class(tag: Tag, name: str) -> bool:
    """Return True when ``tag`` carries the CSS class ``name``."""
    return name in gather_classes(tag.get("class"))


def add_class(tag: Tag, *names: str) -> None:
    """Append CSS classes to ``tag`` without duplicating existing ones."""
    classes = gather_classes(tag.get("class"))
    for name in names:
        if name not in classes:
            classes.append(name)
    tag["class"] = classes


def remove_class(tag: Tag, *names: str) -> None:
    """Drop CSS classes from ``tag``."""
    classes = [name for name in gather_classes(tag.get("class")) if name not in names]
    if classes:
        tag["class"] = classes
    elif "class" in tag.attrs:
        del tag["class"]


def code_element(root: Tag) -> Tag | None:
    """Return the ``code`` element of a rendered block."""
    found = root.find("code")
    return found if isinstance(found, Tag) else None


def iter_lines(root: Tag) -> list[Tag]:
    """Return the ``span.line`` elements of a rendered block in document order."""
    code = code_element(root)
    if code is None:
        return []
    return [
        child
        for child in code.find_all("span", recursive=False)
        if isinstance(child, Tag) and has_class(child, LINE_CLASS)
    ]


__all__ = [
    "LINE_CLASS",
    "add_class",
    "code_element",
    "gather_classes",
    "has_class",
    "iter_lines",
    "remove_class",
]
