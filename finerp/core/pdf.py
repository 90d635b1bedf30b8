import io
import logging
from datetime import date
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from xml.sax.saxutils import escape

from finerp.core.config import settings
from finerp.core.i18n import Translator
from finerp.schemas.bill import Bill
from finerp.schemas.invoice import Invoice
from finerp.schemas.tenant_settings import TenantSettings

logger = logging.getLogger(__name__)

CUSTOM_FONT = "FinerpBody"
_font_name: Optional[str] = None


class PDFGenerationError(Exception):
    pass


def body_font() -> str:
    """Register PDF_FONT_PATH once; fall back to Helvetica when unset."""
    global _font_name
    if _font_name is None:
        _font_name = "Helvetica"
        if settings.PDF_FONT_PATH:
            try:
                pdfmetrics.registerFont(TTFont(CUSTOM_FONT, settings.PDF_FONT_PATH))
                _font_name = CUSTOM_FONT
            except Exception as e:
                logger.error(f"Could not register PDF font {settings.PDF_FONT_PATH}: {e}")
    return _font_name


def _display_date(value: str) -> str:
    return date.fromisoformat(value).strftime("%d %b %Y")


def _document_styles():
    font = body_font()
    styles = getSampleStyleSheet()
    if font == CUSTOM_FONT:
        for name in ("Title", "Normal", "Heading2"):
            styles[name].fontName = font
    footer = ParagraphStyle(name="Footer", fontName=font, fontSize=9, textColor=colors.grey, alignment=1)
    centered = ParagraphStyle(name="Centered", parent=styles["Normal"], alignment=1, textColor=colors.grey)
    return styles, footer, centered


def _items_table(rows: List[list], col_widths: List[int], label_cols: int) -> Table:
    font = body_font()
    table = Table(rows, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, -1), font),
        ('BACKGROUND', (0, 0), (-1, 0), colors.navy),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (0, -1), 'LEFT'),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('LINEBELOW', (0, 0), (-1, -2), 0.25, colors.grey),
        # Totals row: label spans the leading columns
        ('SPAN', (0, -1), (label_cols - 1, -1)),
        ('ALIGN', (0, -1), (label_cols - 1, -1), 'RIGHT'),
        ('LINEABOVE', (0, -1), (-1, -1), 1, colors.black),
    ]))
    return table


def _header_block(title: str, number: str, party_label: str, party: str, doc_date: str,
                  t: Translator, company: Optional[TenantSettings], section: str) -> list:
    styles, _, centered = _document_styles()
    elements = []
    if company and company.company_name:
        elements.append(Paragraph(escape(company.company_name), styles['Heading2']))
        details = " | ".join(v for v in (company.address, company.pan_number) if v)
        if details:
            elements.append(Paragraph(escape(details), styles['Normal']))
        elements.append(Spacer(1, 12))
    elements.append(Paragraph(escape(title), styles['Title']))
    elements.append(Paragraph(escape(number), centered))
    elements.append(Spacer(1, 18))

    meta = Table(
        [[f"{party_label}:", f"{t(f'{section}.date')}:"], [party, _display_date(doc_date)]],
        colWidths=[250, 250],
    )
    meta.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, -1), body_font()),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.grey),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
    ]))
    elements.append(meta)
    elements.append(Spacer(1, 18))
    return elements


def _build(elements: list) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4)
    try:
        doc.build(elements)
    except Exception as e:
        logger.error(f"PDF Build Failed: {str(e)}")
        raise PDFGenerationError("PDF generation failed during document build.") from e
    return buffer.getvalue()


def render_invoice_pdf(invoice: Invoice, t: Translator, company: Optional[TenantSettings] = None) -> bytes:
    _, footer, _ = _document_styles()
    elements = _header_block(
        t('sales.invoice'), invoice.id, t('sales.customer'), invoice.customer_name,
        invoice.date, t, company, "sales",
    )

    rows = [[t('sales.description'), t('sales.quantity'), t('sales.rate'), t('sales.amount')]]
    for item in invoice.items:
        rows.append([item.description, f"{item.quantity:g}", f"{item.rate:.2f}", f"{item.amount:.2f}"])
    rows.append([f"{t('sales.total')}:", "", "", f"{invoice.total_amount:.2f}"])
    elements.append(_items_table(rows, [220, 80, 90, 100], label_cols=3))

    elements.append(Spacer(1, 36))
    elements.append(Paragraph(escape(t('sales.thankYou')), footer))
    return _build(elements)


def render_bill_pdf(bill: Bill, t: Translator, company: Optional[TenantSettings] = None) -> bytes:
    _, footer, _ = _document_styles()
    elements = _header_block(
        t('purchases.bill'), bill.bill_no, t('purchases.vendor'), bill.vendor,
        bill.date, t, company, "purchases",
    )

    rows = [[
        t('purchases.description'), t('purchases.quantity'), t('purchases.rate'),
        t('purchases.vatRate'), t('purchases.amount'), t('purchases.vatAmount'),
    ]]
    for item in bill.items:
        rows.append([
            item.description, f"{item.quantity:g}", f"{item.rate:.2f}",
            f"{item.vat_rate:g}%", f"{item.amount:.2f}", f"{item.vat_amount:.2f}",
        ])
    rows.append([f"{t('purchases.total')}:", "", "", "", f"{bill.total:.2f}", f"{bill.total_vat:.2f}"])
    elements.append(_items_table(rows, [150, 60, 70, 55, 80, 80], label_cols=4))

    elements.append(Spacer(1, 36))
    elements.append(Paragraph(escape(t('purchases.thankYou')), footer))
    return _build(elements)
