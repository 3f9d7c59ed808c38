# backend/services/docx_renderer.py
import logging
from io import BytesIO

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Mm, Pt, RGBColor

from services.errors import RenderError
from services.file_utils import RenderedDocument, DOCX_MIMETYPE

logger = logging.getLogger(__name__)

HEADER_FILL = '1F2937'
CUSTOMER_FILL = 'F9FAFB'


def rgb(hex_color):
    return RGBColor.from_string(hex_color.lstrip('#').upper())


def add_run(paragraph, value, settings, bold=False, size=None, color=None):
    run = paragraph.add_run(value or '')
    run.bold = bold
    run.font.name = settings.font_family
    run.font.size = Pt(size or settings.font_size)
    run.font.color.rgb = rgb(color or settings.font_color)
    return run


def add_paragraph(container, value, settings, bold=False, size=None, align=None, space_after=2):
    paragraph = container.add_paragraph()
    if align is not None:
        paragraph.alignment = align
    paragraph.paragraph_format.space_after = Pt(space_after)
    add_run(paragraph, value, settings, bold=bold, size=size)
    return paragraph


def fill_cell(cell, value, settings, bold=False, align=None, color=None):
    paragraph = cell.paragraphs[0]
    if align is not None:
        paragraph.alignment = align
    add_run(paragraph, value, settings, bold=bold, color=color)
    return paragraph


def shade_cell(cell, fill):
    properties = cell._tc.get_or_add_tcPr()
    shading = OxmlElement('w:shd')
    shading.set(qn('w:val'), 'clear')
    shading.set(qn('w:color'), 'auto')
    shading.set(qn('w:fill'), fill)
    properties.append(shading)


def repeat_header(row):
    """Mark a table row as a header so Word repeats it on each page"""
    properties = row._tr.get_or_add_trPr()
    header = OxmlElement('w:tblHeader')
    header.set(qn('w:val'), 'true')
    properties.append(header)


def setup_section(document, settings):
    section = document.sections[0]
    section.page_width = Mm(210)
    section.page_height = Mm(297)
    section.top_margin = Mm(settings.top_margin)
    section.bottom_margin = Mm(settings.bottom_margin)
    section.left_margin = Mm(15)
    section.right_margin = Mm(15)
    return section


def add_header(document, ir, settings):
    add_paragraph(document, ir.company.name, settings, bold=True, size=settings.font_size + 9,
                  align=WD_ALIGN_PARAGRAPH.CENTER, space_after=0)
    add_paragraph(document, ir.company.tagline, settings, align=WD_ALIGN_PARAGRAPH.CENTER, space_after=0)
    add_paragraph(document, ir.company.contact_line, settings, align=WD_ALIGN_PARAGRAPH.CENTER, space_after=8)

    add_paragraph(document, ir.title, settings, bold=True, size=settings.font_size + 5,
                  align=WD_ALIGN_PARAGRAPH.CENTER, space_after=6)

    info = document.add_table(rows=1, cols=3)
    alignments = (WD_ALIGN_PARAGRAPH.LEFT, WD_ALIGN_PARAGRAPH.CENTER, WD_ALIGN_PARAGRAPH.RIGHT)
    for cell, line, align in zip(info.rows[0].cells, ir.header_lines, alignments):
        fill_cell(cell, line, settings, align=align)


def add_customer(document, ir, settings):
    box = document.add_table(rows=1, cols=1)
    box.style = 'Table Grid'
    cell = box.rows[0].cells[0]
    shade_cell(cell, CUSTOMER_FILL)
    fill_cell(cell, 'To,', settings)
    add_paragraph(cell, ir.customer.name, settings, bold=True, space_after=0)
    for line in ir.customer.lines:
        add_paragraph(cell, line, settings, space_after=0)


def add_items(document, ir, settings):
    table = document.add_table(rows=1, cols=len(ir.columns))
    table.style = 'Table Grid'
    table.alignment = WD_TABLE_ALIGNMENT.CENTER

    header = table.rows[0]
    repeat_header(header)
    for cell, label in zip(header.cells, ir.columns):
        shade_cell(cell, HEADER_FILL)
        fill_cell(cell, label, settings, bold=True, color='#ffffff')

    for row in ir.rows:
        cells = table.add_row().cells
        values = row.cells(ir.show_pricing)
        fill_cell(cells[0], values[0], settings, align=WD_ALIGN_PARAGRAPH.CENTER)
        fill_cell(cells[1], values[1], settings)
        for line in row.measurement_lines:
            measure = cells[1].add_paragraph()
            measure.paragraph_format.space_after = Pt(0)
            add_run(measure, line, settings, size=max(settings.font_size - 2, 6), color=settings.measurement_color)
        for cell, value in zip(cells[2:], values[2:]):
            fill_cell(cell, value, settings, align=WD_ALIGN_PARAGRAPH.RIGHT)

    widths = (Mm(12), Mm(99), Mm(23), Mm(23), Mm(23)) if ir.show_pricing else (Mm(12), Mm(133), Mm(35))
    for row in table.rows:
        for cell, width in zip(row.cells, widths):
            cell.width = width


def add_totals(document, ir, settings):
    table = document.add_table(rows=0, cols=2)
    table.alignment = WD_TABLE_ALIGNMENT.RIGHT
    for line in ir.totals.lines:
        cells = table.add_row().cells
        fill_cell(cells[0], line.label, settings, bold=line.emphasis, align=WD_ALIGN_PARAGRAPH.RIGHT)
        fill_cell(cells[1], line.value, settings, bold=line.emphasis, align=WD_ALIGN_PARAGRAPH.RIGHT)

    words = document.add_paragraph()
    words.paragraph_format.space_before = Pt(6)
    add_run(words, 'Amount in words: ', settings, bold=True)
    add_run(words, ir.totals.amount_in_words, settings)


def add_notes(document, ir, settings):
    for heading, body in (('Notes', ir.notes), ('Terms & Conditions', ir.terms)):
        if not body:
            continue
        add_paragraph(document, heading, settings, bold=True, space_after=0)
        add_paragraph(document, body, settings, size=max(settings.font_size - 2, 6), space_after=6)


def add_signature(document, ir, settings):
    signature = ir.signature
    document.add_paragraph()
    table = document.add_table(rows=1, cols=2)
    left, right = table.rows[0].cells

    fill_cell(left, '\n\n', settings)
    if signature.image_path:
        picture = right.paragraphs[0]
        picture.alignment = WD_ALIGN_PARAGRAPH.CENTER
        # Settings sizes are CSS pixels
        picture.add_run().add_picture(signature.image_path, width=Pt(signature.image_width * 0.75),
                                      height=Pt(signature.image_height * 0.75))
    else:
        fill_cell(right, '\n\n', settings)

    for cell, label in ((left, signature.left_label), (right, signature.right_label)):
        add_paragraph(cell, '_________________________', settings, align=WD_ALIGN_PARAGRAPH.CENTER, space_after=0)
        add_paragraph(cell, label, settings, bold=True, align=WD_ALIGN_PARAGRAPH.CENTER)


def add_footer(section, ir, settings):
    footer = section.footer
    first = footer.paragraphs[0]
    first.alignment = WD_ALIGN_PARAGRAPH.CENTER
    add_run(first, ir.footer_lines[0], settings, size=8, color='#6b7280')
    for line in ir.footer_lines[1:]:
        paragraph = footer.add_paragraph()
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        add_run(paragraph, line, settings, size=8, color='#6b7280')


def render_docx(ir, settings):
    """
    Render a DocumentIR to a Word document.

    Word reflows the content itself, so only the section geometry and
    run-level styling are set here. The pad background is a print/PDF
    feature and is not embedded in the editable document.
    """
    try:
        document = Document()
        section = setup_section(document, settings)
        document.core_properties.title = f"{ir.title} {ir.number}"
        document.core_properties.author = settings.company_name

        add_header(document, ir, settings)
        document.add_paragraph()
        add_customer(document, ir, settings)

        if ir.subject:
            subject = document.add_paragraph()
            subject.paragraph_format.space_before = Pt(6)
            if ir.subject_label:
                add_run(subject, f"{ir.subject_label} ", settings, bold=True)
            else:
                subject.alignment = WD_ALIGN_PARAGRAPH.CENTER
            add_run(subject, ir.subject, settings)

        add_items(document, ir, settings)
        if ir.totals:
            add_totals(document, ir, settings)
        add_notes(document, ir, settings)
        add_signature(document, ir, settings)
        add_footer(section, ir, settings)

        if ir.pad:
            logger.debug(f"Pad background is not embedded in DOCX {ir.number}")

        buffer = BytesIO()
        document.save(buffer)
        logger.info(f"Rendered DOCX {ir.number} ({len(ir.rows)} rows)")
        return RenderedDocument(buffer.getvalue(), f"{ir.file_stem}.docx", DOCX_MIMETYPE)

    except Exception as e:
        logger.error(f"Error generating DOCX {ir.number}: {str(e)}")
        raise RenderError(f"Failed to generate document: {str(e)}") from e
