# backend/services/pdf_renderer.py
import logging
from io import BytesIO
from xml.sax.saxutils import escape

from PIL import Image as PILImage
from PyPDF2 import PdfReader, PdfWriter
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, KeepTogether, Image,
)

from services.errors import RenderError
from services.file_utils import RenderedDocument, PDF_MIMETYPE

logger = logging.getLogger(__name__)

SIDE_MARGIN = 15 * mm
FOOTER_BAND = 10 * mm

# reportlab ships only the base-14 fonts; everything else maps to Helvetica
BASE_FONTS = {
    'times': ('Times-Roman', 'Times-Bold'),
    'courier': ('Courier', 'Courier-Bold'),
    'helvetica': ('Helvetica', 'Helvetica-Bold'),
}


def pdf_fonts(font_family):
    family = (font_family or '').lower()
    for key, fonts in BASE_FONTS.items():
        if key in family:
            return fonts
    return BASE_FONTS['helvetica']


def text(value):
    """Escape user text for Paragraph markup, keeping line breaks"""
    return escape(value or '').replace('\n', '<br/>')


class NumberedCanvas(canvas.Canvas):
    """Canvas that stamps 'Page X of Y' once the total page count is known"""

    def __init__(self, *args, **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_number(page_count)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def draw_page_number(self, page_count):
        self.setFont('Helvetica', 8)
        self.setFillColor(colors.HexColor('#6b7280'))
        self.drawRightString(A4[0] - SIDE_MARGIN, FOOTER_BAND / 2, f"Page {self._pageNumber} of {page_count}")


def blended_pad(image_path, opacity):
    """Pad image pre-blended onto white, since drawImage has no alpha of its own"""
    with PILImage.open(image_path) as source:
        pad = source.convert('RGB')
    white = PILImage.new('RGB', pad.size, 'white')
    blended = PILImage.blend(white, pad, max(0.0, min(1.0, opacity)))
    output = BytesIO()
    blended.save(output, format='PNG')
    output.seek(0)
    return ImageReader(output)


def build_styles(settings):
    regular, bold = pdf_fonts(settings.font_family)
    size = settings.font_size
    color = colors.HexColor(settings.font_color)
    base = getSampleStyleSheet()['Normal']

    return {
        'normal': ParagraphStyle('DocNormal', parent=base, fontName=regular, fontSize=size,
                                 leading=size * 1.3, textColor=color),
        'small': ParagraphStyle('DocSmall', parent=base, fontName=regular, fontSize=max(size - 2, 6),
                                leading=max(size - 2, 6) * 1.3, textColor=color),
        'bold': ParagraphStyle('DocBold', parent=base, fontName=bold, fontSize=size,
                               leading=size * 1.3, textColor=color),
        'company': ParagraphStyle('DocCompany', parent=base, fontName=bold, fontSize=size + 9,
                                  leading=(size + 9) * 1.2, textColor=color, alignment=TA_CENTER),
        'tagline': ParagraphStyle('DocTagline', parent=base, fontName=regular, fontSize=size,
                                  leading=size * 1.3, textColor=color, alignment=TA_CENTER),
        'title': ParagraphStyle('DocTitle', parent=base, fontName=bold, fontSize=size + 5,
                                leading=(size + 5) * 1.3, textColor=color, alignment=TA_CENTER,
                                spaceBefore=6, spaceAfter=6),
        'right': ParagraphStyle('DocRight', parent=base, fontName=regular, fontSize=size,
                                leading=size * 1.3, textColor=color, alignment=TA_RIGHT),
        'right_bold': ParagraphStyle('DocRightBold', parent=base, fontName=bold, fontSize=size,
                                     leading=size * 1.3, textColor=color, alignment=TA_RIGHT),
        'center': ParagraphStyle('DocCenter', parent=base, fontName=regular, fontSize=size,
                                 leading=size * 1.3, textColor=color, alignment=TA_CENTER),
        'measurement': ParagraphStyle('DocMeasurement', parent=base, fontName=regular, fontSize=max(size - 2, 6),
                                      leading=max(size - 2, 6) * 1.3,
                                      textColor=colors.HexColor(settings.measurement_color)),
        'header_cell': ParagraphStyle('DocHeaderCell', parent=base, fontName=bold, fontSize=size,
                                      leading=size * 1.3, textColor=colors.white),
    }


def item_table(ir, styles, width, settings):
    """
    Items table with one sub-row per measurement line.

    reportlab never splits a single table row, so measurement lines get rows
    of their own; an item with a long breakdown then breaks across pages
    between lines instead of overflowing the frame.
    """
    border = colors.HexColor(settings.table_border_color)
    data = [[Paragraph(text(label), styles['header_cell']) for label in ir.columns]]
    commands = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1f2937')),
        ('BOX', (0, 0), (-1, -1), 0.75, border),
        ('LINEBELOW', (0, 0), (-1, 0), 0.75, border),
        ('LINEAFTER', (0, 0), (-2, -1), 0.75, border),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]
    blank = [''] * (len(ir.columns) - 2)

    for row in ir.rows:
        cells = row.cells(ir.show_pricing)
        first = len(data)
        data.append(
            [Paragraph(text(cells[0]), styles['center']), Paragraph(text(cells[1]), styles['normal'])]
            + [Paragraph(text(cell), styles['right']) for cell in cells[2:]]
        )
        for line in row.measurement_lines:
            data.append([''] + [Paragraph(text(line), styles['measurement'])] + blank)

        last = len(data) - 1
        if last > first:
            commands += [
                ('BOTTOMPADDING', (0, first), (-1, last - 1), 0),
                ('TOPPADDING', (0, first + 1), (-1, last), 1),
            ]
        commands.append(('LINEBELOW', (0, last), (-1, last), 0.75, border))

    if ir.show_pricing:
        col_widths = [12 * mm, width - 12 * mm - 3 * 27 * mm, 27 * mm, 27 * mm, 27 * mm]
    else:
        col_widths = [12 * mm, width - 12 * mm - 35 * mm, 35 * mm]

    # Header row repeats on every page the table spans
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle(commands))
    return table


def totals_flowables(ir, styles, width):
    data = []
    for line in ir.totals.lines:
        style = styles['right_bold'] if line.emphasis else styles['right']
        data.append([Paragraph(text(line.label), style), Paragraph(text(line.value), style)])

    table = Table(data, colWidths=[width - 45 * mm, 45 * mm])
    table.setStyle(TableStyle([
        ('LINEABOVE', (0, -1), (-1, -1), 1, colors.HexColor('#1f2937')),
        ('TOPPADDING', (0, 0), (-1, -1), 2),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
    ]))
    words = Paragraph(f"<b>Amount in words:</b> {text(ir.totals.amount_in_words)}", styles['normal'])
    return [table, Spacer(1, 4 * mm), words]


def signature_table(ir, styles, width):
    signature = ir.signature
    right = []
    if signature.image_path:
        # Settings sizes are CSS pixels
        right.append(Image(signature.image_path, width=signature.image_width * 0.75,
                           height=signature.image_height * 0.75))
    else:
        right.append(Spacer(1, 15 * mm))
    right += [Paragraph('_________________________', styles['center']),
              Paragraph(text(signature.right_label), styles['center'])]

    left = [Spacer(1, 15 * mm),
            Paragraph('_________________________', styles['center']),
            Paragraph(text(signature.left_label), styles['center'])]

    table = Table([[left, right]], colWidths=[width / 2, width / 2])
    table.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'BOTTOM')]))
    return table


def build_story(ir, settings, width):
    styles = build_styles(settings)
    border = colors.HexColor(settings.table_border_color)
    elements = []

    # Company header
    elements.append(Paragraph(text(ir.company.name), styles['company']))
    elements.append(Paragraph(text(ir.company.tagline), styles['tagline']))
    elements.append(Paragraph(text(ir.company.contact_line), styles['tagline']))
    elements.append(Spacer(1, 4 * mm))

    elements.append(Paragraph(text(ir.title), styles['title']))

    info = Table([[Paragraph(text(line), style) for line, style in
                   zip(ir.header_lines, (styles['normal'], styles['center'], styles['right']))]],
                 colWidths=[width / 3] * 3)
    elements.append(info)
    elements.append(Spacer(1, 3 * mm))

    # Customer box
    customer = [Paragraph('To,', styles['normal']), Paragraph(text(ir.customer.name), styles['bold'])]
    customer += [Paragraph(text(line), styles['normal']) for line in ir.customer.lines]
    customer_box = Table([[customer]], colWidths=[width])
    customer_box.setStyle(TableStyle([
        ('BOX', (0, 0), (-1, -1), 1, border),
        ('BACKGROUND', (0, 0), (-1, -1), colors.HexColor('#f9fafb')),
        ('LEFTPADDING', (0, 0), (-1, -1), 8),
    ]))
    elements.append(customer_box)
    elements.append(Spacer(1, 3 * mm))

    if ir.subject and ir.subject_label:
        elements.append(Paragraph(f"<b>{text(ir.subject_label)}</b> {text(ir.subject)}", styles['normal']))
        elements.append(Spacer(1, 3 * mm))
    elif ir.subject:
        elements.append(Paragraph(text(ir.subject), styles['center']))
        elements.append(Spacer(1, 3 * mm))

    elements.append(item_table(ir, styles, width, settings))
    elements.append(Spacer(1, 4 * mm))

    # Totals and words never split across a page boundary
    if ir.totals:
        elements.append(KeepTogether(totals_flowables(ir, styles, width)))
        elements.append(Spacer(1, 4 * mm))

    if ir.notes:
        elements.append(KeepTogether([Paragraph('<b>Notes</b>', styles['normal']),
                                      Paragraph(text(ir.notes), styles['small'])]))
        elements.append(Spacer(1, 3 * mm))
    if ir.terms:
        elements.append(KeepTogether([Paragraph('<b>Terms &amp; Conditions</b>', styles['normal']),
                                      Paragraph(text(ir.terms), styles['small'])]))
        elements.append(Spacer(1, 3 * mm))

    elements.append(KeepTogether([Spacer(1, 10 * mm), signature_table(ir, styles, width)]))
    return elements


def render_pdf(ir, settings):
    """
    Render a DocumentIR to PDF bytes.

    Returns:
        RenderedDocument: the PDF bytes with filename and mimetype
    """
    try:
        buffer = BytesIO()
        page_width, page_height = A4
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=SIDE_MARGIN,
            leftMargin=SIDE_MARGIN,
            topMargin=settings.top_margin * mm,
            bottomMargin=settings.bottom_margin * mm + FOOTER_BAND,
            title=f"{ir.title} {ir.number}",
            author=settings.company_name,
        )

        pad = blended_pad(ir.pad.image_path, ir.pad.opacity) if ir.pad else None
        regular, _ = pdf_fonts(settings.font_family)

        def decorate_page(c, d):
            c.saveState()
            if pad:
                c.drawImage(pad, 0, 0, width=page_width, height=page_height)
            c.setFont(regular, 8)
            c.setFillColor(colors.HexColor('#6b7280'))
            c.drawString(SIDE_MARGIN, FOOTER_BAND / 2 + 10, ir.footer_lines[0])
            c.drawString(SIDE_MARGIN, FOOTER_BAND / 2, ir.footer_lines[1])
            c.restoreState()

        doc.build(
            build_story(ir, settings, doc.width),
            onFirstPage=decorate_page,
            onLaterPages=decorate_page,
            canvasmaker=NumberedCanvas,
        )

        logger.info(f"Rendered PDF {ir.number} ({len(ir.rows)} rows)")
        return RenderedDocument(buffer.getvalue(), f"{ir.file_stem}.pdf", PDF_MIMETYPE)

    except Exception as e:
        logger.error(f"Error generating PDF {ir.number}: {str(e)}")
        raise RenderError(f"Failed to generate PDF: {str(e)}") from e


def merge_pdfs(documents):
    """Concatenate rendered PDFs in the given order"""
    writer = PdfWriter()
    for document in documents:
        for page in PdfReader(BytesIO(document.content)).pages:
            writer.add_page(page)
    output = BytesIO()
    writer.write(output)
    return output.getvalue()


def render_bulk_pdf(irs, settings, filename):
    """One PDF per job, merged in the caller's order"""
    irs = list(irs)
    rendered = [render_pdf(ir, settings) for ir in irs]
    try:
        content = merge_pdfs(rendered)
    except Exception as e:
        logger.error(f"Error merging {len(rendered)} PDFs: {str(e)}")
        raise RenderError(f"Failed to combine PDFs: {str(e)}") from e

    logger.info(f"Merged {len(rendered)} documents into {filename}")
    return RenderedDocument(content, filename, PDF_MIMETYPE)
