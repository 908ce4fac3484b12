"""Window composition: regions resolved into rectangles over a cell surface.

The layout is recomputed every frame. A ``Region`` describes a child by
offset and size policy; ``resolve`` turns it into an absolute ``Rect``
against an already-resolved parent. Nothing is retained between frames, so
there is no parent/child object graph, only rectangles.

Drawing goes through ``Window``, a ``Rect`` bound to the frame's ``Surface``.
All cell writes are clipped to both the window and the surface; a window
whose rectangle is degenerate draws nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from timecli.events import Mouse
from timecli.utils import grapheme_width, graphemes

# int -> 256-color palette index, tuple -> 24-bit RGB
Color = Union[int, tuple[int, int, int]]

_SGR_RESET = "\x1b[0m"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class Region:
    """Child descriptor: offset from the parent origin plus a size policy.

    ``width``/``height`` are a literal cell count, or ``None`` to fill the
    parent's remaining extent.
    """

    x_off: int = 0
    y_off: int = 0
    width: Optional[int] = None
    height: Optional[int] = None


def resolve(parent: Rect, region: Region) -> Rect:
    """Resolve *region* against *parent* into an absolute rectangle.

    Literal limits are taken as given and are not clipped, so a region whose
    offset plus limit exceeds the parent resolves to a rectangle that sticks
    out of it. Callers either keep limits within the parent or rely on the
    drawing primitives, which clip every cell write.
    """
    width = region.width if region.width is not None else max(0, parent.width - region.x_off)
    height = region.height if region.height is not None else max(0, parent.height - region.y_off)
    return Rect(
        x=parent.x + region.x_off,
        y=parent.y + region.y_off,
        width=width,
        height=height,
    )


def hit_test(rect: Rect, col: int, row: int) -> bool:
    """Return ``True`` if the cell ``(col, row)`` lies inside *rect*."""
    return (
        rect.x <= col < rect.x + rect.width
        and rect.y <= row < rect.y + rect.height
    )


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Style:
    bold: bool = False
    dim: bool = False
    italic: bool = False
    underline: bool = False
    reverse: bool = False
    fg: Optional[Color] = None
    bg: Optional[Color] = None

    def sgr(self) -> str:
        """SGR sequence selecting this style from a reset state."""
        codes: list[str] = []
        if self.bold:
            codes.append("1")
        if self.dim:
            codes.append("2")
        if self.italic:
            codes.append("3")
        if self.underline:
            codes.append("4")
        if self.reverse:
            codes.append("7")
        if self.fg is not None:
            codes.append(_color_code(38, self.fg))
        if self.bg is not None:
            codes.append(_color_code(48, self.bg))
        if not codes:
            return _SGR_RESET
        return f"{_SGR_RESET}\x1b[{';'.join(codes)}m"


def _color_code(base: int, color: Color) -> str:
    if isinstance(color, tuple):
        r, g, b = color
        return f"{base};2;{r};{g};{b}"
    return f"{base};5;{color}"


@dataclass(frozen=True)
class Cell:
    char: str = " "
    style: Style = field(default_factory=Style)
    # 0 marks the trailing half of a wide character
    width: int = 1


BLANK = Cell()
_CONTINUATION = Cell(char="", width=0)


class Surface:
    """A frame-sized grid of cells that encodes to a full repaint."""

    def __init__(self, width: int, height: int) -> None:
        self.width = max(width, 0)
        self.height = max(height, 0)
        self._rows: list[list[Cell]] = [
            [BLANK] * self.width for _ in range(self.height)
        ]

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def cell(self, col: int, row: int) -> Cell:
        return self._rows[row][col]

    def write_cell(self, col: int, row: int, cell: Cell) -> None:
        """Store *cell*; writes outside the surface are dropped.

        A wide cell whose trailing half would fall off the right edge is
        dropped as a whole. Overwriting either half of an existing wide cell
        blanks its other half.
        """
        if not self.in_bounds(col, row):
            return
        if not self.in_bounds(col + max(cell.width, 1) - 1, row):
            return
        line = self._rows[row]
        for offset in range(max(cell.width, 1)):
            self._release(line, col + offset)
        line[col] = cell
        for extra in range(1, cell.width):
            line[col + extra] = _CONTINUATION

    @staticmethod
    def _release(line: list[Cell], col: int) -> None:
        # Blank every cell of the wide character covering *col*
        lead = col
        while lead > 0 and line[lead].width == 0:
            lead -= 1
        for i in range(lead, min(lead + max(line[lead].width, 1), len(line))):
            line[i] = BLANK

    def row_text(self, row: int) -> str:
        """Plain text of one row, for inspection."""
        return "".join(c.char for c in self._rows[row])

    def window(self) -> Window:
        return Window(Rect(0, 0, self.width, self.height), self)

    def encode(self) -> str:
        """Escape sequence stream that repaints every cell."""
        out: list[str] = []
        for y, row in enumerate(self._rows):
            out.append(f"\x1b[{y + 1};1H")
            current: Style | None = None
            for cell in row:
                if cell.width == 0:
                    continue
                if cell.style != current:
                    out.append(cell.style.sgr())
                    current = cell.style
                out.append(cell.char)
        out.append(_SGR_RESET)
        return "".join(out)


# ---------------------------------------------------------------------------
# Window
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PrintResult:
    col: int
    row: int
    overflow: bool


class Window:
    """A resolved rectangle of a ``Surface``."""

    def __init__(self, rect: Rect, surface: Surface) -> None:
        self.rect = rect
        self.surface = surface

    @property
    def x(self) -> int:
        return self.rect.x

    @property
    def y(self) -> int:
        return self.rect.y

    @property
    def width(self) -> int:
        return self.rect.width

    @property
    def height(self) -> int:
        return self.rect.height

    def child(
        self,
        x_off: int = 0,
        y_off: int = 0,
        width: int | None = None,
        height: int | None = None,
    ) -> Window:
        region = Region(x_off=x_off, y_off=y_off, width=width, height=height)
        return Window(resolve(self.rect, region), self.surface)

    def fill(self, cell: Cell) -> None:
        if self.rect.degenerate:
            return
        for row in range(self.height):
            for col in range(self.width):
                self.surface.write_cell(self.x + col, self.y + row, cell)

    def clear(self) -> None:
        self.fill(BLANK)

    def print_segment(self, text: str, style: Style | None = None) -> PrintResult:
        """Write *text* from the window origin, wrapping at the right edge.

        Stops at the bottom edge with ``overflow`` set.
        """
        if self.rect.degenerate:
            return PrintResult(0, 0, overflow=bool(text))
        style = style or Style()

        col = 0
        row = 0
        for g in graphemes(text):
            if g in ("\n", "\r\n"):
                col = 0
                row += 1
                if row >= self.height:
                    return PrintResult(col, row, overflow=True)
                continue
            w = grapheme_width(g)
            if w == 0:
                continue
            if col + w > self.width:
                col = 0
                row += 1
            if row >= self.height or w > self.width:
                return PrintResult(col, row, overflow=True)
            self.surface.write_cell(self.x + col, self.y + row, Cell(g, style, w))
            col += w
        return PrintResult(col, row, overflow=False)

    def has_mouse(self, mouse: Mouse | None) -> Mouse | None:
        """Return *mouse* if it points inside this window."""
        if mouse is None:
            return None
        if hit_test(self.rect, mouse.col, mouse.row):
            return mouse
        return None
