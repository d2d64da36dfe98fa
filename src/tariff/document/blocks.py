"""Typed content blocks forming a document's layout-free content plan.

Blocks carry no coordinates or fonts, only logical order and page-break
hints.  The renderer owns pagination and orphan control.
"""

from __future__ import annotations

import hashlib
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class ParagraphStyle(StrEnum):
    """Presentation hints for a paragraph."""

    BODY = "body"
    BULLET = "bullet"
    NOTE = "note"
    CENTER = "center"
    EMPHASIS = "emphasis"


class Heading(BaseModel):
    """A section heading.

    Level 1 headings are numbered tariff items (``item="310"``); ``new_page``
    asks the renderer to start the heading on a fresh page.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["heading"] = "heading"
    text: str
    level: int = Field(default=1, ge=1, le=3)
    item: str | None = None
    new_page: bool = False


class Paragraph(BaseModel):
    """A block of running text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["paragraph"] = "paragraph"
    text: str
    style: ParagraphStyle = ParagraphStyle.BODY


class Table(BaseModel):
    """A titled grid of pre-formatted cells.

    ``key`` identifies the table's role (``transportation_weight``,
    ``sample_weight_1``) independently of its display title.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["table"] = "table"
    key: str
    title: str = ""
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    total_row: bool = False


class KeyValueBox(BaseModel):
    """A shaded box of label/value pairs."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["key_value"] = "key_value"
    title: str = ""
    items: tuple[tuple[str, str], ...]


ContentBlock = Annotated[Heading | Paragraph | Table | KeyValueBox, Field(discriminator="kind")]


class ContentPlan(BaseModel):
    """An ordered, renderer-agnostic description of one document.

    ``generated_at`` is the only wall-clock value in a plan and is excluded
    from :meth:`fingerprint`.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str
    title: str
    subject: str
    author: str
    blocks: tuple[ContentBlock, ...]
    footer: tuple[str, ...] = ()
    generated_at: datetime | None = None

    def fingerprint(self) -> str:
        """Return a SHA-256 digest of the plan's content, ignoring ``generated_at``."""
        payload = self.model_dump_json(exclude={"generated_at"})
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def tables(self) -> list[Table]:
        """Return the plan's table blocks in order."""
        return [block for block in self.blocks if isinstance(block, Table)]
