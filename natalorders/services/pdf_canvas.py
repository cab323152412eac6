from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

from PySide6.QtCore import QBuffer, QIODevice, QMarginsF, QPointF, QRectF, Qt
from PySide6.QtGui import (
    QColor,
    QFont,
    QFontMetricsF,
    QGuiApplication,
    QPageLayout,
    QPageSize,
    QPainter,
    QPdfWriter,
    QPen,
)

logger = logging.getLogger(__name__)

# Layout is expressed in millimetres on an A4 page.
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN_LEFT = 14.0
MARGIN_RIGHT = 14.0
CONTENT_WIDTH = PAGE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT
TOP_MARGIN = 20.0
PAGE_BREAK_THRESHOLD = 250.0
TABLE_BOTTOM_LIMIT = PAGE_HEIGHT - 14.0
TABLE_SPACING = 15.0
TABLE_FALLBACK_ADVANCE = 50.0

_FONT_FAMILY = "Helvetica"
_CELL_PADDING = 1.8
_POINT_TO_MM = 25.4 / 72.0
_HEAD_FILL = QColor(0, 0, 0)
_STRIPE_FILL = QColor(245, 245, 245)
_BODY_TEXT = QColor(40, 40, 40)
_INVERTED_TEXT = QColor(255, 255, 255)
_WRAP_FLAGS = Qt.AlignmentFlag.AlignLeft.value | Qt.AlignmentFlag.AlignTop.value | Qt.TextFlag.TextWordWrap.value
_CELL_FLAGS = Qt.AlignmentFlag.AlignLeft.value | Qt.AlignmentFlag.AlignVCenter.value | Qt.TextFlag.TextWordWrap.value

_application: Optional[QGuiApplication] = None


def ensure_gui_application(platform: str = "offscreen") -> None:
    """Start a QGuiApplication so fonts are available to the PDF writer."""
    global _application
    if QGuiApplication.instance() is not None:
        return
    if platform:
        os.environ.setdefault("QT_QPA_PLATFORM", platform)
    _application = QGuiApplication(["natalorders"])
    logger.debug("Started QGuiApplication on platform %s", os.environ.get("QT_QPA_PLATFORM"))


@dataclass
class PageCursor:
    """Running vertical position of one document build, in millimetres."""

    y: float = TOP_MARGIN
    top: float = TOP_MARGIN
    threshold: float = PAGE_BREAK_THRESHOLD

    def advance(self, by: float) -> None:
        self.y += by

    def ensure_room(self, needed: float = 0.0) -> bool:
        """Reset to the top margin and report True when a page break is due."""
        if self.y + needed > self.threshold:
            self.reset()
            return True
        return False

    def reset(self) -> None:
        self.y = self.top

    def move_below(self, bottom: Optional[float], spacing: float = TABLE_SPACING) -> None:
        if bottom is None:
            self.y += TABLE_FALLBACK_ADVANCE
        else:
            self.y = bottom + spacing


class PdfCanvas:
    """Single-use drawing surface writing an A4 PDF into memory."""

    def __init__(self, title: str = "", *, resolution: int = 144, platform: str = "offscreen") -> None:
        ensure_gui_application(platform)

        self._buffer = QBuffer()
        self._buffer.open(QIODevice.OpenModeFlag.WriteOnly)

        self._writer = QPdfWriter(self._buffer)
        self._writer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
        self._writer.setPageMargins(QMarginsF(0, 0, 0, 0), QPageLayout.Unit.Millimeter)
        self._writer.setResolution(resolution)
        self._writer.setTitle(title)
        self._writer.setCreator("natalorders")

        self._scale = resolution / 25.4
        self._painter = QPainter()
        if not self._painter.begin(self._writer):
            self._buffer.close()
            raise RuntimeError("Unable to start PDF rendering.")

        self.cursor = PageCursor()
        self.page_count = 1

    def __enter__(self) -> "PdfCanvas":
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        if self._painter.isActive():
            self._painter.end()
        if self._buffer.isOpen():
            self._buffer.close()

    def finish(self) -> bytes:
        self._painter.end()
        content = bytes(self._buffer.data().data())
        self._buffer.close()
        return content

    def new_page(self) -> None:
        if not self._writer.newPage():
            raise RuntimeError("Unable to add a page to the PDF document.")
        self.page_count += 1
        self.cursor.reset()

    def ensure_room(self, needed: float = 0.0) -> bool:
        if self.cursor.ensure_room(needed):
            self.new_page()
            return True
        return False

    def text_at(self, text: str, y: float, *, size: float = 10, bold: bool = False, x: float = MARGIN_LEFT) -> float:
        """Draw text with its first baseline at y, wrapping at the right margin.

        Returns the height in millimetres that wrapping added below the first line.
        """
        font = self._font(size, bold)
        metrics = QFontMetricsF(font, self._writer)
        width = self._mm(PAGE_WIDTH - MARGIN_RIGHT - x)
        bounds = metrics.boundingRect(QRectF(0, 0, width, self._mm(PAGE_HEIGHT)), _WRAP_FLAGS, text)
        rect = QRectF(self._mm(x), self._mm(y) - metrics.ascent(), width, bounds.height())

        self._painter.setFont(font)
        self._painter.setPen(QColor(0, 0, 0))
        self._painter.drawText(rect, _WRAP_FLAGS, text)
        return max(0.0, bounds.height() - metrics.height()) / self._scale

    def write_line(self, text: str, *, size: float = 10, advance: float = 6.0, bold: bool = False) -> None:
        overflow = self.text_at(text, self.cursor.y, size=size, bold=bold)
        self.cursor.advance(advance + overflow)

    def rule(self, width: float = 0.5) -> None:
        pen = QPen(QColor(0, 0, 0))
        pen.setWidthF(self._mm(width * _POINT_TO_MM))
        self._painter.setPen(pen)
        y = self._mm(self.cursor.y)
        self._painter.drawLine(
            QPointF(self._mm(MARGIN_LEFT), y),
            QPointF(self._mm(PAGE_WIDTH - MARGIN_RIGHT), y),
        )

    def table(
        self,
        head: Sequence[str],
        body: Sequence[Sequence[str]],
        *,
        foot: Optional[Sequence[str]] = None,
        font_size: float = 10,
    ) -> Optional[float]:
        """Draw a striped table at the cursor and return its bottom edge.

        Cell text wraps inside its column and each row is as tall as its
        tallest cell. Rows that do not fit continue on a new page with the
        header repeated. Returns None when there is nothing to draw.
        """
        if not head and not body and not foot:
            return None

        column_count = max(len(head), len(foot or []), *(len(row) for row in body), 1)
        column_width = CONTENT_WIDTH / column_count
        head_height = self.row_height(head, column_width, font_size, bold=True) if head else 0.0

        def draw_head(top: float) -> float:
            if head:
                self._draw_row(head, top, column_width, head_height, font_size, fill=_HEAD_FILL, inverted=True)
            return top + head_height

        y = self.cursor.y
        first_height = self.row_height(body[0], column_width, font_size) if body else 0.0
        if y + head_height + first_height > TABLE_BOTTOM_LIMIT:
            self.new_page()
            y = self.cursor.y
        y = draw_head(y)

        for index, row in enumerate(body):
            height = self.row_height(row, column_width, font_size)
            if y + height > TABLE_BOTTOM_LIMIT:
                self.new_page()
                y = draw_head(self.cursor.y)
            fill = _STRIPE_FILL if index % 2 == 1 else None
            self._draw_row(row, y, column_width, height, font_size, fill=fill)
            y += height

        if foot:
            height = self.row_height(foot, column_width, font_size, bold=True)
            if y + height > TABLE_BOTTOM_LIMIT:
                self.new_page()
                y = self.cursor.y
            self._draw_row(foot, y, column_width, height, font_size, fill=_HEAD_FILL, inverted=True)
            y += height

        return y

    def row_height(self, cells: Sequence[str], column_width: float, font_size: float, *, bold: bool = False) -> float:
        """Height in millimetres of a table row once its cells are wrapped."""
        metrics = QFontMetricsF(self._font(font_size, bold), self._writer)
        text_width = self._mm(column_width - 2 * _CELL_PADDING)
        tallest = metrics.height()
        for value in cells:
            bounds = metrics.boundingRect(QRectF(0, 0, text_width, self._mm(PAGE_HEIGHT)), _CELL_FLAGS, str(value))
            tallest = max(tallest, bounds.height())
        return tallest / self._scale + 2 * _CELL_PADDING

    def _draw_row(
        self,
        cells: Sequence[str],
        y: float,
        column_width: float,
        row_height: float,
        font_size: float,
        *,
        fill: Optional[QColor] = None,
        inverted: bool = False,
    ) -> None:
        if fill is not None:
            self._painter.fillRect(
                QRectF(self._mm(MARGIN_LEFT), self._mm(y), self._mm(CONTENT_WIDTH), self._mm(row_height)),
                fill,
            )

        self._painter.setFont(self._font(font_size, inverted))
        self._painter.setPen(_INVERTED_TEXT if inverted else _BODY_TEXT)
        text_width = self._mm(column_width - 2 * _CELL_PADDING)

        for column, value in enumerate(cells):
            x = MARGIN_LEFT + column * column_width + _CELL_PADDING
            rect = QRectF(self._mm(x), self._mm(y), text_width, self._mm(row_height))
            self._painter.drawText(rect, _CELL_FLAGS, str(value))

    def _font(self, size: float, bold: bool = False) -> QFont:
        font = QFont(_FONT_FAMILY)
        font.setPointSizeF(size)
        font.setBold(bold)
        return font

    def _mm(self, value: float) -> float:
        return value * self._scale
