"""Tests for PDF rendering of content plans."""

import pytest
from fpdf.errors import FPDFException

from tariff.document.assembler import build_content_plan
from tariff.document.blocks import ContentPlan, Heading, KeyValueBox, Paragraph, ParagraphStyle, Table
from tariff.document.renderer import TariffPDF, render_plan, to_latin1
from tariff.domain.errors import AssemblyFailure
from tariff.domain.models import CarrierProfile, TariffOrder


def _small_plan(*blocks) -> ContentPlan:
    return ContentPlan(
        document_id="TARIFF-NA-TRF-TEST0001-20260101",
        title="Tariff - Test",
        subject="Test",
        author="Tester",
        blocks=blocks,
        footer=("footer line",),
    )


class TestToLatin1:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("plain", "plain"),
            ("• item", "- item"),
            ("“quoted” – ‘x’", "\"quoted\" - 'x'"),
            ("≤ 5 ≥ 1", "<= 5 >= 1"),
            ("2 men × 2 hours", "2 men × 2 hours"),
            ("49 U.S.C. § 13702", "49 U.S.C. § 13702"),
            ("✓ done", "[x] done"),
            ("日本", "??"),
        ],
        ids=["ascii", "bullet", "quotes-dash", "comparisons", "times", "section", "check", "cjk"],
    )
    def test_mapping(self, text: str, expected: str) -> None:
        assert to_latin1(text) == expected


class TestRenderPlan:
    def test_full_tariff_renders(self, sample_profile: CarrierProfile, sample_order: TariffOrder) -> None:
        plan = build_content_plan(sample_profile, sample_order.rates, sample_order)
        data = render_plan(plan)

        assert data.startswith(b"%PDF")
        assert len(data) > 10_000

    def test_every_block_kind(self) -> None:
        plan = _small_plan(
            Heading(text="TARIFF"),
            Heading(text="SECTION", item="100", new_page=True),
            Heading(text="Sub", level=2),
            Paragraph(text="Body text"),
            Paragraph(text="Bullet", style=ParagraphStyle.BULLET),
            Paragraph(text="Note", style=ParagraphStyle.NOTE),
            Table(key="t", title="Title", columns=("A", "B"), rows=(("1", "2"), ("Total", "3")),
                  total_row=True),
            KeyValueBox(title="Box", items=(("Label", "Value"),)),
        )

        assert render_plan(plan).startswith(b"%PDF")

    def test_long_table_spans_pages(self) -> None:
        rows = tuple((f"row {i}", f"${i}.00") for i in range(200))
        plan = _small_plan(Table(key="long", columns=("Item", "Amount"), rows=rows))

        pdf = TariffPDF(plan)
        pdf.add_page()
        for block in plan.blocks:
            pdf.render_block(block)
        assert pdf.page_no() > 1

    def test_new_page_heading_at_top_does_not_add_blank_page(self) -> None:
        plan = _small_plan(Heading(text="FIRST", item="100", new_page=True))

        pdf = TariffPDF(plan)
        pdf.add_page()
        pdf.render_block(plan.blocks[0])
        assert pdf.page_no() == 1

    def test_fpdf_error_becomes_assembly_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken(self, block):
            raise FPDFException("Not enough horizontal space")

        monkeypatch.setattr(TariffPDF, "render_block", broken)

        with pytest.raises(AssemblyFailure) as exc_info:
            render_plan(_small_plan(Paragraph(text="x")), order_id="TRF-TEST0001")

        assert exc_info.value.order_id == "TRF-TEST0001"
        assert "horizontal space" in exc_info.value.reason
        assert isinstance(exc_info.value.__cause__, FPDFException)

    def test_failure_defaults_to_document_id(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken(self, block):
            raise ValueError("bad value")

        monkeypatch.setattr(TariffPDF, "render_block", broken)

        with pytest.raises(AssemblyFailure) as exc_info:
            render_plan(_small_plan(Paragraph(text="x")))

        assert exc_info.value.order_id == "TARIFF-NA-TRF-TEST0001-20260101"
