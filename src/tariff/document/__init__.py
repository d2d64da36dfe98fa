"""Tariff document assembly and rendering.

Re-exports key functions and types for convenient access:
    from tariff.document import build_content_plan, render_plan, ContentPlan
"""

from tariff.document.assembler import (
    DEFAULT_ISSUER,
    DEFAULT_ISSUER_WEBSITE,
    SAMPLE_SHIPMENTS,
    build_content_plan,
    format_long_date,
    sample_breakdowns,
)
from tariff.document.blocks import (
    ContentBlock,
    ContentPlan,
    Heading,
    KeyValueBox,
    Paragraph,
    ParagraphStyle,
    Table,
)
from tariff.document.renderer import TariffPDF, render_plan, to_latin1
from tariff.document.sections import TABLE_OF_CONTENTS, TERRITORY_DESCRIPTIONS, SectionDefinition

__all__ = [
    "DEFAULT_ISSUER",
    "DEFAULT_ISSUER_WEBSITE",
    "SAMPLE_SHIPMENTS",
    "TABLE_OF_CONTENTS",
    "TERRITORY_DESCRIPTIONS",
    "ContentBlock",
    "ContentPlan",
    "Heading",
    "KeyValueBox",
    "Paragraph",
    "ParagraphStyle",
    "SectionDefinition",
    "Table",
    "TariffPDF",
    "build_content_plan",
    "format_long_date",
    "render_plan",
    "sample_breakdowns",
    "to_latin1",
]
