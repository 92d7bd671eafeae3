from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

ElementType = Literal["heading", "bullet", "numbered", "paragraph", "code", "table"]


@dataclass(frozen=True, slots=True)
class Heading:
    content: str
    level: int = 1


@dataclass(frozen=True, slots=True)
class Bullet:
    content: str
    indent: int = 0


@dataclass(frozen=True, slots=True)
class Numbered:
    content: str
    ordinal: str = "1"
    indent: int = 0


@dataclass(frozen=True, slots=True)
class Paragraph:
    content: str


@dataclass(frozen=True, slots=True)
class Code:
    content: str


@dataclass(frozen=True, slots=True)
class Table:
    """GitHub-style table.

    Row lengths are not checked against the header: short rows render blank
    cells and long rows overflow to the right.
    """

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...] = ()

    @property
    def content(self) -> str:
        return ""


SlideElement: TypeAlias = Heading | Bullet | Numbered | Paragraph | Code | Table


@dataclass(frozen=True, slots=True)
class CrystalImageSpec:
    source: str
    x: int | None = None
    y: int | None = None
    width: int | None = None
    height: int | None = None
    # Interactive icon position; defaults to the image position.
    icon_x: int | None = None
    icon_y: int | None = None


@dataclass(frozen=True, slots=True)
class StaticImageSpec:
    source: str
    alt: str = ""
    x: int | None = None
    y: int | None = None
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True, slots=True)
class Slide:
    elements: tuple[SlideElement, ...] = ()
    crystals: tuple[CrystalImageSpec, ...] = ()
    static_images: tuple[StaticImageSpec, ...] = ()

    @property
    def title(self) -> str | None:
        """Content of the first heading, if any."""

        return next((e.content for e in self.elements if isinstance(e, Heading)), None)


@dataclass(frozen=True, slots=True)
class Document:
    slides: tuple[Slide, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.slides)

    def __getitem__(self, index: int) -> Slide:
        return self.slides[index]

    def __iter__(self) -> Iterator[Slide]:
        return iter(self.slides)
