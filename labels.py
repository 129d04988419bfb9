"""
PDF label sheets for inventory items (reportlab).

Letter paper, a 3 x 5 grid of bordered 2in x 1in labels per page, each showing
the inventory number and the item name.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Table, TableStyle
from reportlab.platypus.doctemplate import LayoutError

from errors import PersistenceError
from item import InventoryItem
from query import items_at_location, items_matching_inventory_number

logger = logging.getLogger(__name__)

LABEL_WIDTH = 2.0 * inch
LABEL_HEIGHT = 1.0 * inch
COLUMNS_PER_PAGE = 3
ROWS_PER_PAGE = 5
PAGE_MARGIN = 0.5 * inch
HEADER_SPACE = 0.5 * inch
# SimpleDocTemplate frames pad 6pt on every side.
FRAME_PADDING = 6

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def safe_filename_part(value: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", value.strip())


class LabelGenerator:
    def __init__(self, output_dir: Union[str, Path] = ".", clock: Callable[[], datetime] = datetime.now) -> None:
        self.output_dir = Path(output_dir)
        self._clock = clock
        styles = getSampleStyleSheet()
        self._number_style = ParagraphStyle("LabelNumber", parent=styles["Normal"], fontName="Helvetica-Bold", fontSize=11, leading=13)
        self._name_style = ParagraphStyle("LabelName", parent=styles["Normal"], fontSize=10, leading=12)

    def all_items(self, items: Sequence[InventoryItem]) -> Optional[Path]:
        ordered = sorted(items, key=lambda i: (i.inventory_number.casefold(), i.name.casefold()))
        return self.generate(ordered, self._filename("All"), "Inventory Labels - All Items")

    def for_location(self, items: Sequence[InventoryItem], location: str) -> Optional[Path]:
        selected = items_at_location(items, location)
        if not selected:
            logger.info("No items found for location '%s'", location)
            return None
        return self.generate(
            selected,
            self._filename(f"Location_{safe_filename_part(location)}"),
            f"Inventory Labels - Location: {location.strip()}",
        )

    def for_inventory_number(self, items: Sequence[InventoryItem], pattern: str) -> Optional[Path]:
        """Labels for inventory numbers containing `pattern`; blank selects all items."""
        pattern = (pattern or "").strip()
        selected = items_matching_inventory_number(items, pattern)
        if not selected:
            logger.info("No items found matching inventory number pattern '%s'", pattern)
            return None
        return self.generate(
            selected,
            self._filename(f"Pattern_{safe_filename_part(pattern) if pattern else 'ALL'}"),
            f"Inventory Labels - Pattern: {pattern}" if pattern else "Inventory Labels - All Items",
        )

    def generate(self, items: Sequence[InventoryItem], filename: str, title: str) -> Optional[Path]:
        """Writes the label sheet and returns its path, or None when `items` is empty."""
        if not items:
            logger.info("No items provided to generate labels")
            return None

        path = self.output_dir / filename
        per_page = COLUMNS_PER_PAGE * ROWS_PER_PAGE
        story = []
        for start in range(0, len(items), per_page):
            if story:
                story.append(PageBreak())
            story.append(self._page_grid(items[start:start + per_page]))

        def decorate(canvas, doc) -> None:
            width, height = letter
            canvas.saveState()
            canvas.setFont("Helvetica-Bold", 14)
            canvas.drawCentredString(width / 2, height - PAGE_MARGIN, title)
            canvas.setFont("Helvetica", 9)
            canvas.drawCentredString(width / 2, PAGE_MARGIN / 2, f"Page {doc.page}")
            canvas.restoreState()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            doc = SimpleDocTemplate(
                str(path),
                pagesize=letter,
                leftMargin=PAGE_MARGIN,
                rightMargin=PAGE_MARGIN,
                topMargin=PAGE_MARGIN + HEADER_SPACE,
                bottomMargin=PAGE_MARGIN,
                title=title,
            )
            doc.build(story, onFirstPage=decorate, onLaterPages=decorate)
        except (OSError, LayoutError) as e:
            logger.error("Error generating PDF %s: %s", path, e)
            raise PersistenceError(f"Failed to generate labels: {e}") from e

        logger.info("Generated %d labels in %s", len(items), path)
        return path

    def _label(self, item: InventoryItem) -> Table:
        label = Table(
            [
                [Paragraph(f"Inv#: {escape(item.inventory_number)}", self._number_style)],
                [Paragraph(escape(item.name), self._name_style)],
            ],
            colWidths=[LABEL_WIDTH],
            rowHeights=[LABEL_HEIGHT * 0.4, LABEL_HEIGHT * 0.6],
        )
        label.setStyle(TableStyle([
            ("BOX", (0, 0), (-1, -1), 1, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 5),
            ("RIGHTPADDING", (0, 0), (-1, -1), 5),
        ]))
        return label

    def _page_grid(self, items: Sequence[InventoryItem]) -> Table:
        cells = [self._label(i) for i in items]
        rows = [cells[r:r + COLUMNS_PER_PAGE] for r in range(0, len(cells), COLUMNS_PER_PAGE)]
        # Pad the last row so every row has the same number of columns.
        rows[-1] = rows[-1] + [""] * (COLUMNS_PER_PAGE - len(rows[-1]))

        usable_width = letter[0] - 2 * PAGE_MARGIN - 2 * FRAME_PADDING
        usable_height = letter[1] - 2 * PAGE_MARGIN - HEADER_SPACE - 2 * FRAME_PADDING
        grid = Table(
            rows,
            colWidths=[usable_width / COLUMNS_PER_PAGE] * COLUMNS_PER_PAGE,
            rowHeights=[min(usable_height / ROWS_PER_PAGE, LABEL_HEIGHT * 1.8)] * len(rows),
        )
        grid.setStyle(TableStyle([
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        return grid

    def _filename(self, kind: str) -> str:
        return f"InventoryLabels_{kind}_{self._clock().strftime('%Y%m%d_%H%M%S')}.pdf"
