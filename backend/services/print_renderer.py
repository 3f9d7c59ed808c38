# backend/services/print_renderer.py
"""
Browser-print rendering.

The output is a standalone HTML document: every style rule is inlined in one
<style> block and images are embedded as data URIs, so it renders the same in
a fresh print window as it does anywhere else. A small script opens the print
dialog once the page has loaded.
"""
import base64
import logging
import mimetypes

from jinja2 import Environment, BaseLoader, select_autoescape

from services.errors import RenderError
from services.file_utils import RenderedDocument, HTML_MIMETYPE

logger = logging.getLogger(__name__)

PRINT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ ir.title }} {{ ir.number }}</title>
<style>
  @page { size: A4; margin: {{ settings.top_margin }}mm 15mm {{ settings.bottom_margin }}mm 15mm; }
  * { box-sizing: border-box; }
  body { margin: 0; font-family: '{{ settings.font_family }}', Arial, sans-serif;
         font-size: {{ settings.font_size }}pt; color: {{ settings.font_color }}; }
  .pad { position: fixed; top: 0; left: 0; width: 100%; height: 100%; z-index: -1;
         opacity: {{ ir.pad.opacity if ir.pad else 0 }}; }
  .company { text-align: center; margin-bottom: 12px; }
  .company h1 { margin: 0; font-size: {{ settings.font_size + 9 }}pt; }
  .company p { margin: 2px 0; }
  h2.title { text-align: center; font-size: {{ settings.font_size + 5 }}pt; margin: 10px 0; letter-spacing: 1px; }
  .info { display: flex; justify-content: space-between; margin-bottom: 10px; }
  .customer { border: 1px solid {{ settings.table_border_color }}; background: #f9fafb;
              padding: 8px 12px; margin-bottom: 10px; }
  .customer p { margin: 2px 0; }
  .subject { margin-bottom: 10px; }
  .subject.centered { text-align: center; white-space: pre-line; }
  .measure { color: {{ settings.measurement_color }}; font-size: {{ [settings.font_size - 2, 6] | max }}pt; }
  table.items { width: 100%; border-collapse: collapse; margin-bottom: 12px; }
  table.items thead { display: table-header-group; }
  table.items th { background: #1f2937; color: #ffffff; text-align: left; }
  table.items th, table.items td { border: 1px solid {{ settings.table_border_color }}; padding: 5px 6px;
                                   vertical-align: top; }
  table.items tr { page-break-inside: avoid; }
  td.num { text-align: right; white-space: nowrap; }
  td.sl { text-align: center; width: 36px; }
  .totals { margin-left: auto; width: 55%; border-collapse: collapse; page-break-inside: avoid; }
  .totals td { padding: 3px 6px; text-align: right; }
  .totals tr.grand td { font-weight: bold; border-top: 1px solid #1f2937; }
  .words { margin: 10px 0; page-break-inside: avoid; }
  .notes { margin: 10px 0; font-size: {{ [settings.font_size - 2, 6] | max }}pt; white-space: pre-line; }
  .notes h4 { margin: 0 0 4px 0; font-size: {{ settings.font_size }}pt; }
  .signatures { display: flex; justify-content: space-between; margin-top: 50px; page-break-inside: avoid; }
  .signature { width: 40%; text-align: center; }
  .signature .space { height: {{ ir.signature.image_height }}px; display: flex; align-items: flex-end;
                      justify-content: center; }
  .signature .line { border-top: 1px solid {{ settings.font_color }}; padding-top: 4px; font-weight: bold; }
  .footer { margin-top: 24px; text-align: center; font-size: 8pt; color: #6b7280; }
  .footer p { margin: 2px 0; }
</style>
</head>
<body>
{% if pad_src %}<img class="pad" src="{{ pad_src }}" alt="">{% endif %}
<div class="company">
  <h1>{{ ir.company.name }}</h1>
  <p>{{ ir.company.tagline }}</p>
  <p>{{ ir.company.contact_line }}</p>
</div>
<h2 class="title">{{ ir.title }}</h2>
<div class="info">
  {% for line in ir.header_lines %}<span>{{ line }}</span>{% endfor %}
</div>
<div class="customer">
  <p>To,</p>
  <p><strong>{{ ir.customer.name }}</strong></p>
  {% for line in ir.customer.lines %}<p>{{ line }}</p>{% endfor %}
</div>
{% if ir.subject and ir.subject_label %}<div class="subject"><strong>{{ ir.subject_label }}</strong> {{ ir.subject }}</div>
{% elif ir.subject %}<div class="subject centered">{{ ir.subject }}</div>{% endif %}
<table class="items">
  <thead>
    <tr>{% for column in ir.columns %}<th>{{ column }}</th>{% endfor %}</tr>
  </thead>
  <tbody>
    {% for row in ir.rows %}
    <tr>
      <td class="sl">{{ row.serial }}</td>
      <td>{{ row.description }}{% for line in row.measurement_lines %}<div class="measure">{{ line }}</div>{% endfor %}</td>
      <td class="num">{{ row.quantity }}</td>
      {% if ir.show_pricing %}
      <td class="num">{{ row.unit_price }}</td>
      <td class="num">{{ row.total }}</td>
      {% endif %}
    </tr>
    {% endfor %}
  </tbody>
</table>
{% if ir.totals %}
<table class="totals">
  {% for line in ir.totals.lines %}
  <tr{% if line.emphasis %} class="grand"{% endif %}><td>{{ line.label }}</td><td>{{ line.value }}</td></tr>
  {% endfor %}
</table>
<div class="words"><strong>Amount in words:</strong> {{ ir.totals.amount_in_words }}</div>
{% endif %}
{% if ir.notes %}<div class="notes"><h4>Notes</h4>{{ ir.notes }}</div>{% endif %}
{% if ir.terms %}<div class="notes"><h4>Terms &amp; Conditions</h4>{{ ir.terms }}</div>{% endif %}
<div class="signatures">
  <div class="signature"><div class="space"></div><div class="line">{{ ir.signature.left_label }}</div></div>
  <div class="signature">
    <div class="space">{% if signature_src %}<img src="{{ signature_src }}" alt="Signature"
      width="{{ ir.signature.image_width }}" height="{{ ir.signature.image_height }}">{% endif %}</div>
    <div class="line">{{ ir.signature.right_label }}</div>
  </div>
</div>
<div class="footer">
  {% for line in ir.footer_lines %}<p>{{ line }}</p>{% endfor %}
</div>
{% if auto_print %}
<script>
  window.onload = function () {
    window.focus();
    window.print();
  };
</script>
{% endif %}
</body>
</html>
"""

env = Environment(loader=BaseLoader(), autoescape=select_autoescape())
template = env.from_string(PRINT_TEMPLATE)


def data_uri(path):
    """Embed an image file as a data: URI"""
    if not path:
        return None
    mimetype = mimetypes.guess_type(path)[0] or 'image/png'
    with open(path, 'rb') as image:
        encoded = base64.b64encode(image.read()).decode('ascii')
    return f"data:{mimetype};base64,{encoded}"


def render_print_html(ir, settings, auto_print=True):
    """
    Render a DocumentIR to print-ready HTML.

    Returns:
        RenderedDocument: UTF-8 encoded HTML
    """
    try:
        html = template.render(
            ir=ir,
            settings=settings,
            pad_src=data_uri(ir.pad.image_path) if ir.pad else None,
            signature_src=data_uri(ir.signature.image_path),
            auto_print=auto_print,
        )
        logger.info(f"Rendered print HTML {ir.number} ({len(ir.rows)} rows)")
        return RenderedDocument(html.encode('utf-8'), f"{ir.file_stem}.html", HTML_MIMETYPE)

    except Exception as e:
        logger.error(f"Error generating print HTML {ir.number}: {str(e)}")
        raise RenderError(f"Failed to generate print document: {str(e)}") from e
