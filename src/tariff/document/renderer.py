"""Paginate a :class:`ContentPlan` into a Letter-size PDF with fpdf2.

The renderer owns every layout decision: fonts, spacing, page breaks and
orphan control.  Headings start a new page when flagged and are never left
alone at the bottom of a page; table rows are never split and the header
row repeats after a break.
"""

from __future__ import annotations

from fpdf import FPDF, FontFace
from fpdf.enums import XPos, YPos
from fpdf.errors import FPDFException

from tariff.document.blocks import (
    ContentBlock,
    ContentPlan,
    Heading,
    KeyValueBox,
    Paragraph,
    ParagraphStyle,
    Table,
)
from tariff.domain.errors import AssemblyFailure

MARGIN = 72
LINE_HEIGHT = 14
FONT = "Helvetica"

HEADING_SIZES = {1: 14, 2: 11, 3: 10}
BODY_SIZE = 10
NOTE_SIZE = 8

NAVY = (0, 51, 102)
SHADE = (240, 240, 240)
HEADER_FILL = (220, 225, 235)

# Core PDF fonts are latin-1 only
_LATIN1_REPLACEMENTS = {
    "•": "-",
    "–": "-",
    "—": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "✓": "[x]",
    "≤": "<=",
    "≥": ">=",
}


def to_latin1(text: str) -> str:
    """Map typographic characters to latin-1 and replace anything else with '?'."""
    for char, replacement in _LATIN1_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", "replace").decode("latin-1")


class TariffPDF(FPDF):
    """FPDF document with the tariff's page footer and block primitives."""

    def __init__(self, plan: ContentPlan) -> None:
        super().__init__(orientation="portrait", unit="pt", format="letter")
        self.plan = plan
        self.set_margins(MARGIN, MARGIN, MARGIN)
        self.set_auto_page_break(auto=True, margin=MARGIN)
        self.set_title(to_latin1(plan.title))
        self.set_subject(to_latin1(plan.subject))
        self.set_author(to_latin1(plan.author))
        self.set_creator(to_latin1(plan.author))

    def footer(self) -> None:
        self.set_y(-MARGIN + 24)
        self.set_font(FONT, "", NOTE_SIZE)
        self.set_text_color(110, 110, 110)
        self.cell(
            0,
            10,
            to_latin1(f"Document ID: {self.plan.document_id}   |   Page {self.page_no()} of {{nb}}"),
            align="C",
        )
        self.set_text_color(0, 0, 0)

    @property
    def content_width(self) -> float:
        return self.w - self.l_margin - self.r_margin

    def ensure_space(self, height: float) -> None:
        """Start a new page unless *height* points fit on the current one."""
        if self.will_page_break(height):
            self.add_page()

    def at_page_top(self) -> bool:
        return self.get_y() <= self.t_margin + 1

    # -- blocks -------------------------------------------------------------

    def heading(self, block: Heading) -> None:
        if block.new_page and not self.at_page_top():
            self.add_page()
        size = HEADING_SIZES[block.level]
        text = f"ITEM {block.item} - {block.text}" if block.item else block.text
        # Keep the heading with at least two lines of what follows
        self.ensure_space(size + 6 + LINE_HEIGHT * 2)
        if block.level == 1 and not self.at_page_top():
            self.ln(8)
        self.set_font(FONT, "B", size)
        self.set_text_color(*NAVY)
        align = "C" if block.level == 1 and not block.item else "L"
        self.multi_cell(0, size + 4, to_latin1(text), align=align, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_text_color(0, 0, 0)
        if block.level == 1:
            self.set_draw_color(*NAVY)
            self.line(self.l_margin, self.get_y() + 2, self.w - self.r_margin, self.get_y() + 2)
            self.ln(8)
        else:
            self.ln(2)

    def paragraph(self, block: Paragraph) -> None:
        text = to_latin1(block.text)
        self.ensure_space(LINE_HEIGHT * 2)
        if block.style is ParagraphStyle.BULLET:
            self.set_font(FONT, "", BODY_SIZE)
            self.set_x(self.l_margin + 12)
            self.cell(12, LINE_HEIGHT, "-")
            self.multi_cell(
                self.content_width - 24, LINE_HEIGHT, text, new_x=XPos.LMARGIN, new_y=YPos.NEXT
            )
            return
        style, size, align = {
            ParagraphStyle.BODY: ("", BODY_SIZE, "J"),
            ParagraphStyle.NOTE: ("I", NOTE_SIZE + 1, "C"),
            ParagraphStyle.CENTER: ("B", BODY_SIZE + 1, "C"),
            ParagraphStyle.EMPHASIS: ("B", BODY_SIZE, "L"),
        }[block.style]
        self.set_font(FONT, style, size)
        self.multi_cell(0, LINE_HEIGHT, text, align=align, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(4)

    def _column_widths(self, block: Table) -> tuple[float, ...]:
        self.set_font(FONT, "", BODY_SIZE - 1)
        widths = []
        for i, column in enumerate(block.columns):
            cells = [column, *(row[i] for row in block.rows if i < len(row))]
            widths.append(max(self.get_string_width(to_latin1(c)) for c in cells) + 12)
        return tuple(widths)

    def table_block(self, block: Table) -> None:
        # Title, header and first row stay together
        self.ensure_space(LINE_HEIGHT * (4 if block.title else 3))
        if block.title:
            self.set_font(FONT, "B", BODY_SIZE)
            self.cell(0, LINE_HEIGHT, to_latin1(block.title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font(FONT, "", BODY_SIZE - 1)
        with self.table(
            col_widths=self._column_widths(block),
            width=self.content_width,
            line_height=LINE_HEIGHT,
            headings_style=FontFace(emphasis="BOLD", fill_color=HEADER_FILL),
            text_align="LEFT",
        ) as table:
            header = table.row()
            for column in block.columns:
                header.cell(to_latin1(column))
            last = len(block.rows) - 1
            for i, values in enumerate(block.rows):
                bold = block.total_row and i == last
                row = table.row()
                for value in values:
                    row.cell(
                        to_latin1(value),
                        style=FontFace(emphasis="BOLD", fill_color=SHADE) if bold else None,
                    )
        self.ln(8)

    def key_value(self, block: KeyValueBox) -> None:
        rows = len(block.items) + (1 if block.title else 0)
        self.ensure_space(LINE_HEIGHT * rows + 12)
        label_width = 150
        self.set_fill_color(*SHADE)
        if block.title:
            self.set_font(FONT, "B", BODY_SIZE + 1)
            self.cell(
                0, LINE_HEIGHT + 4, to_latin1(block.title), align="C", fill=True,
                new_x=XPos.LMARGIN, new_y=YPos.NEXT,
            )
        for label, value in block.items:
            self.set_font(FONT, "B", BODY_SIZE)
            self.cell(label_width, LINE_HEIGHT + 2, to_latin1(f"{label}:"), fill=True)
            self.set_font(FONT, "", BODY_SIZE)
            self.multi_cell(
                self.content_width - label_width, LINE_HEIGHT + 2, to_latin1(value), fill=True,
                new_x=XPos.LMARGIN, new_y=YPos.NEXT,
            )
        self.ln(10)

    def closing_footer(self) -> None:
        self.ensure_space(LINE_HEIGHT * (len(self.plan.footer) + 2))
        self.ln(LINE_HEIGHT)
        self.set_font(FONT, "I", NOTE_SIZE)
        lines = list(self.plan.footer)
        if self.plan.generated_at is not None:
            lines.append(f"Generated on {self.plan.generated_at:%Y-%m-%d %H:%M} UTC")
        for line in lines:
            self.cell(0, LINE_HEIGHT - 2, to_latin1(line), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def render_block(self, block: ContentBlock) -> None:
        if isinstance(block, Heading):
            self.heading(block)
        elif isinstance(block, Paragraph):
            self.paragraph(block)
        elif isinstance(block, Table):
            self.table_block(block)
        else:
            self.key_value(block)


def render_plan(plan: ContentPlan, order_id: str | None = None) -> bytes:
    """Render *plan* to PDF bytes.

    Args:
        plan: The content plan to paginate.
        order_id: Order reported in failures; defaults to the document ID.

    Returns:
        The complete PDF document.

    Raises:
        AssemblyFailure: If fpdf2 rejects a block or the output cannot be encoded.
    """
    try:
        pdf = TariffPDF(plan)
        pdf.add_page()
        for block in plan.blocks:
            pdf.render_block(block)
        pdf.closing_footer()
        return bytes(pdf.output())
    except (FPDFException, UnicodeEncodeError, ValueError) as exc:
        raise AssemblyFailure(order_id or plan.document_id, str(exc)) from exc
