"""Table of contents accumulated while the writers walk the API model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass
class TOCItem:
    """One entry of the table of contents.

    Attributes:
        level: Heading level (1 for sections, 2 for everything below).
        title: Display title.
        link: Anchor the entry links to.
        file: Output file holding the entry's content, relative to the
            writer's output directory. Empty for entries written into their
            parent's file, such as operations.
        subsections: Nested entries.
    """

    level: int
    title: str
    link: str
    file: str = ""
    subsections: list[TOCItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "level": self.level,
            "title": self.title,
            "link": self.link,
        }
        if self.file:
            data["file"] = self.file
        if self.subsections:
            data["subsections"] = [s.to_dict() for s in self.subsections]
        return data


@dataclass
class TOC:
    title: str
    copyright: str
    sections: list[TOCItem] = field(default_factory=list)

    def iter_items(self) -> Iterator[tuple[int, TOCItem]]:
        """Yield ``(depth, item)`` for every entry in document order.

        Depth is 0 for sections, 1 for their subsections and so on.
        """

        def walk(items: list[TOCItem], depth: int) -> Iterator[tuple[int, TOCItem]]:
            for item in items:
                yield depth, item
                yield from walk(item.subsections, depth + 1)

        yield from walk(self.sections, 0)

    def iter_files(self) -> Iterator[tuple[int, str]]:
        """Yield ``(depth, file)`` for every entry that owns a file."""
        for depth, item in self.iter_items():
            if item.file:
                yield depth, item.file

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "copyright": self.copyright,
            "sections": [s.to_dict() for s in self.sections],
        }
