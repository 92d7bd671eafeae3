from __future__ import annotations

from pydantic import BaseModel, Field, PositiveInt

from slideship.core.layout import LayoutElement, ResolvedCrystal, ResolvedStaticImage
from slideship.core.lifecycle import SlideManager
from slideship.core.objects import CrystalObject, LiveObject, StaticImageObject, TableObject, TextObject
from slideship.core.richtext import plain_text
from slideship.core.table_layout import TableGeometry


class ReloadRequest(BaseModel):
    text: str


class ImageSizesRequest(BaseModel):
    # Native pixel size per image source, as measured by the renderer.
    sizes: dict[str, tuple[PositiveInt, PositiveInt]] = Field(default_factory=dict)


class LayoutElementView(BaseModel):
    x: float
    y: float
    content: str
    font_size: int
    color: str
    font_family: str
    font_style: str
    alignment: str
    element_type: str


class TableView(BaseModel):
    headers: list[str]
    rows: list[list[str]]
    column_widths: list[float]
    header_height: float
    row_heights: list[float]
    width: float
    height: float


class CrystalView(BaseModel):
    source: str
    x: float
    y: float
    width: float
    height: float
    icon_x: float
    icon_y: float


class RevealedView(BaseModel):
    x: float
    y: float
    width: float
    height: float
    dismiss_x: float
    dismiss_y: float


class StaticImageView(BaseModel):
    source: str
    alt: str
    x: float
    y: float
    width: float
    height: float


class LiveObjectView(BaseModel):
    handle: str
    kind: str
    state: str | None = None

    element: LayoutElementView | None = None
    table: TableView | None = None
    crystal: CrystalView | None = None
    revealed: RevealedView | None = None
    image: StaticImageView | None = None

    # Current draw color for text (highlight/flash aware).
    display_color: str | None = None


class SlideView(BaseModel):
    index: int
    count: int
    generation: int
    title: str | None = None
    is_transitioning: bool
    objects: list[LiveObjectView] = Field(default_factory=list)


class DeckView(BaseModel):
    session_id: str
    slide_count: int
    current_index: int
    is_transitioning: bool
    titles: list[str | None] = Field(default_factory=list)


class NavigationResponse(BaseModel):
    started: bool
    deck: DeckView


class ObjectEventResponse(BaseModel):
    changed: bool
    object: LiveObjectView


def _element_view(el: LayoutElement) -> LayoutElementView:
    return LayoutElementView(
        x=el.x,
        y=el.y,
        content=el.content,
        font_size=el.font_size,
        color=el.color,
        font_family=el.font_family,
        font_style=el.font_style,
        alignment=el.alignment,
        element_type=el.element_type,
    )


def _table_view(g: TableGeometry) -> TableView:
    return TableView(
        headers=list(g.headers),
        rows=[list(row) for row in g.rows],
        column_widths=list(g.column_widths),
        header_height=g.header_height,
        row_heights=list(g.row_heights),
        width=g.width,
        height=g.height,
    )


def _crystal_view(c: ResolvedCrystal) -> CrystalView:
    return CrystalView(source=c.source, x=c.x, y=c.y, width=c.width, height=c.height, icon_x=c.icon_x, icon_y=c.icon_y)


def _image_view(i: ResolvedStaticImage) -> StaticImageView:
    return StaticImageView(source=i.source, alt=i.alt, x=i.x, y=i.y, width=i.width, height=i.height)


def live_object_view(obj: LiveObject, *, now: float) -> LiveObjectView:
    view = LiveObjectView(handle=obj.handle, kind=obj.kind, state=obj.state)
    if isinstance(obj, TextObject):
        view.element = _element_view(obj.element)
        view.display_color = obj.display_color(now)
    elif isinstance(obj, TableObject):
        view.element = _element_view(obj.element)
        view.table = _table_view(obj.geometry)
    elif isinstance(obj, CrystalObject):
        view.crystal = _crystal_view(obj.crystal)
        if obj.revealed is not None:
            r = obj.revealed
            view.revealed = RevealedView(
                x=r.x, y=r.y, width=r.width, height=r.height, dismiss_x=r.dismiss_x, dismiss_y=r.dismiss_y
            )
    elif isinstance(obj, StaticImageObject):
        view.image = _image_view(obj.image)
    return view


def deck_view(manager: SlideManager, *, session_id: str) -> DeckView:
    return DeckView(
        session_id=session_id,
        slide_count=len(manager.document),
        current_index=manager.current_index,
        is_transitioning=manager.is_transitioning,
        titles=[plain_text(s.title) if s.title is not None else None for s in manager.document],
    )


def slide_view(manager: SlideManager, *, now: float) -> SlideView:
    title = None
    if len(manager.document):
        title = manager.document[manager.current_index].title
    return SlideView(
        index=manager.current_index,
        count=len(manager.document),
        generation=manager.generation,
        title=plain_text(title) if title is not None else None,
        is_transitioning=manager.is_transitioning,
        objects=[live_object_view(obj, now=now) for obj in manager.live_objects],
    )
