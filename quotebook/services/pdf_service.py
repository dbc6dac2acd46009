"""Quote and invoice PDF rendering (reportlab platypus).

The renderer never does arithmetic on money: every figure it prints was computed by
PricingService and stored on the quote or invoice.
"""
import logging
from io import BytesIO
from xml.sax.saxutils import escape

from flask import current_app
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    BaseDocTemplate, Frame, KeepTogether, PageTemplate, Paragraph, Spacer, Table, TableStyle,
)

from quotebook.models import Setting

logger = logging.getLogger(__name__)

MARGIN = 50
HEADER_HEIGHT = 40
FOOTER_HEIGHT = 30
GREY = colors.HexColor('#555555')
RULE = colors.HexColor('#cccccc')


def _company_profile():
    return {
        'name': Setting.get('company_name', 'Company Name'),
        'address': Setting.get('company_address', ''),
        'phone': Setting.get('company_phone', ''),
        'email': Setting.get('company_email', ''),
        'gstin': Setting.get('company_gstin', ''),
        'currency': Setting.get('currency', current_app.config['DEFAULT_CURRENCY']),
    }


def _fmt(value):
    return '{:,.2f}'.format(value or 0)


def _hline(width_pt):
    """Thin horizontal line (grey), full frame width."""
    t = Table([['']], colWidths=[width_pt], rowHeights=[2])
    t.setStyle(TableStyle([
        ('LINEBELOW', (0, 0), (-1, -1), 0.5, RULE),
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('RIGHTPADDING', (0, 0), (-1, -1), 0),
    ]))
    return t


def _styles():
    styles = getSampleStyleSheet()
    return {
        'title': ParagraphStyle(
            'DocTitle', parent=styles['Heading1'],
            fontSize=18, spaceAfter=2, textColor=colors.black, fontName='Helvetica-Bold',
        ),
        'heading': ParagraphStyle(
            'Section', parent=styles['Heading3'], fontSize=11, spaceBefore=10, spaceAfter=4,
        ),
        'small': ParagraphStyle('Small', parent=styles['Normal'], fontSize=9, textColor=GREY),
        'small_right': ParagraphStyle(
            'SmallRight', parent=styles['Normal'], fontSize=9, textColor=GREY, alignment=2,
        ),
        'body': ParagraphStyle('Body', parent=styles['Normal'], fontSize=10, spaceAfter=2),
        'cell': ParagraphStyle('Cell', parent=styles['Normal'], fontSize=9, leading=11),
    }


def _page_decorations(company, doc_label):
    """onPage callback drawing the running header and footer on every page."""
    def draw(canv, doc):
        width, height = doc.pagesize
        canv.saveState()
        canv.setFont('Helvetica-Bold', 11)
        canv.drawString(MARGIN, height - MARGIN + 10, company['name'])
        canv.setFont('Helvetica', 9)
        canv.setFillColor(GREY)
        canv.drawRightString(width - MARGIN, height - MARGIN + 10, doc_label)
        canv.setStrokeColor(RULE)
        canv.setLineWidth(0.5)
        canv.line(MARGIN, height - MARGIN + 4, width - MARGIN, height - MARGIN + 4)

        contact = ' | '.join(p for p in (company['phone'], company['email']) if p)
        canv.line(MARGIN, MARGIN - 10, width - MARGIN, MARGIN - 10)
        canv.drawString(MARGIN, MARGIN - 22, contact)
        canv.drawRightString(width - MARGIN, MARGIN - 22, 'Page %d' % doc.page)
        canv.restoreState()
    return draw


def _items_table(items, currency, frame_width, styles):
    data = [['#', 'Description', 'Qty', f'Unit Price ({currency})', f'Amount ({currency})']]
    for idx, item in enumerate(items, start=1):
        data.append([
            str(idx),
            Paragraph(escape(item.description or ''), styles['cell']),
            str(item.quantity),
            _fmt(item.unit_price),
            _fmt(item.subtotal),
        ])
    col_widths = [0.35 * inch, frame_width - 3.85 * inch, 0.6 * inch, 1.4 * inch, 1.5 * inch]
    t = Table(data, colWidths=col_widths, repeatRows=1)
    t.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f2f2f2')),
        ('LINEBELOW', (0, 0), (-1, 0), 0.5, RULE),
        ('LINEBELOW', (0, -1), (-1, -1), 0.5, RULE),
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    return t


def _percent_label(label, percent):
    if percent is None:
        return label
    return f'{label} ({percent.normalize():f}%)'


def _totals_box(record, currency):
    """Totals rows; zero discount/tax/shipping lines are left out."""
    rows = [['Subtotal', _fmt(record.subtotal)]]
    if record.discount:
        rows.append([_percent_label('Discount', getattr(record, 'discount_percent', None)),
                     '-' + _fmt(record.discount)])
    for field, label in (('cgst', 'CGST'), ('sgst', 'SGST'), ('igst', 'IGST')):
        amount = getattr(record, field)
        if amount:
            rows.append([_percent_label(label, getattr(record, f'{field}_percent', None)), _fmt(amount)])
    if record.shipping_charges:
        rows.append(['Shipping', _fmt(record.shipping_charges)])
    rows.append([f'Total ({currency})', _fmt(record.total)])

    t = Table(rows, colWidths=[2.0 * inch, 1.5 * inch], hAlign='RIGHT')
    t.setStyle(TableStyle([
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (0, -1), (-1, -1), 0.75, colors.black),
        ('BOX', (0, 0), (-1, -1), 0.5, RULE),
    ]))
    return t


def _grid(data, col_widths, styles):
    rows = [[Paragraph(escape(str(v)) if v not in (None, '') else '—', styles['cell']) for v in row]
            for row in data]
    t = Table(rows, colWidths=col_widths, repeatRows=1)
    t.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f2f2f2')),
        ('GRID', (0, 0), (-1, -1), 0.25, RULE),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]))
    return t


def _bom_section(bom, frame_width, styles):
    story = [Paragraph('Bill of Materials', styles['heading'])]
    data = [['Part No.', 'Description', 'Manufacturer', 'Qty', 'UoM', 'Specifications']]
    for row in bom:
        data.append([
            row.get('part_number'), row.get('description'), row.get('manufacturer'),
            row.get('quantity'), row.get('unit_of_measure'), row.get('specifications'),
        ])
    w = frame_width
    story.append(_grid(data, [0.16 * w, 0.28 * w, 0.16 * w, 0.08 * w, 0.08 * w, 0.24 * w], styles))
    return story


def _sla_section(sla, frame_width, styles):
    story = [Paragraph('Service Level Agreement', styles['heading'])]
    if sla.get('overview'):
        story.append(Paragraph(escape(sla['overview']), styles['body']))
    for key, label in (('response_time', 'Response time'), ('resolution_time', 'Resolution time'),
                       ('availability', 'Availability'), ('support_hours', 'Support hours'),
                       ('escalation_process', 'Escalation')):
        if sla.get(key):
            story.append(Paragraph(f'<b>{label}:</b> {escape(str(sla[key]))}', styles['body']))
    metrics = sla.get('metrics') or []
    if metrics:
        data = [['Metric', 'Target', 'Measurement', 'Penalty']]
        for m in metrics:
            data.append([m.get('name'), m.get('target'), m.get('measurement'), m.get('penalty')])
        w = frame_width
        story.append(Spacer(1, 4))
        story.append(_grid(data, [0.34 * w, 0.22 * w, 0.2 * w, 0.24 * w], styles))
    return story


def _timeline_section(timeline, frame_width, styles):
    story = [Paragraph('Project Timeline', styles['heading'])]
    if timeline.get('project_overview'):
        story.append(Paragraph(escape(timeline['project_overview']), styles['body']))
    if timeline.get('start_date') or timeline.get('end_date'):
        story.append(Paragraph(
            f"{escape(str(timeline.get('start_date') or '?'))} to {escape(str(timeline.get('end_date') or '?'))}",
            styles['small'],
        ))
    milestones = timeline.get('milestones') or []
    if milestones:
        data = [['Milestone', 'Start', 'End', 'Status', 'Deliverables']]
        for m in milestones:
            data.append([m.get('name'), m.get('start_date'), m.get('end_date'),
                         m.get('status'), m.get('deliverables')])
        w = frame_width
        story.append(Spacer(1, 4))
        story.append(_grid(data, [0.28 * w, 0.14 * w, 0.14 * w, 0.14 * w, 0.3 * w], styles))
    return story


def _build_document(title, doc_number, meta_rows, client, record, items, sections=None):
    buffer = BytesIO()
    pw_pt, ph_pt = A4
    frame_width = pw_pt - 2 * MARGIN
    frame = Frame(
        MARGIN, MARGIN, frame_width, ph_pt - 2 * MARGIN - HEADER_HEIGHT / 2,
        id='normal', leftPadding=0, rightPadding=0, topPadding=0, bottomPadding=0,
    )
    company = _company_profile()
    doc = BaseDocTemplate(
        buffer, pagesize=A4, title=f'{title} {doc_number}',
        leftMargin=MARGIN, rightMargin=MARGIN, topMargin=MARGIN, bottomMargin=MARGIN,
    )
    doc.addPageTemplates([
        PageTemplate(id='All', frames=[frame], onPage=_page_decorations(company, f'{title} {doc_number}')),
    ])
    styles = _styles()
    story = []

    # ----- Company block -----
    story.append(Paragraph(f"<b>{escape(company['name'])}</b>", styles['body']))
    if company['address']:
        story.append(Paragraph(escape(company['address']).replace('\n', '<br/>'), styles['small']))
    if company['gstin']:
        story.append(Paragraph(f"GSTIN: {escape(company['gstin'])}", styles['small']))
    story.append(Spacer(1, 0.15 * inch))

    # ----- Title and reference rows -----
    story.append(Paragraph(title.upper(), styles['title']))
    story.append(_hline(frame_width))
    story.append(Spacer(1, 0.08 * inch))
    ref_rows = [[Paragraph(left, styles['small']), Paragraph(right, styles['small_right'])]
                for left, right in meta_rows]
    ref_table = Table(ref_rows, colWidths=[frame_width / 2, frame_width / 2])
    ref_table.setStyle(TableStyle([
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('RIGHTPADDING', (0, 0), (-1, -1), 0),
    ]))
    story.append(ref_table)
    story.append(Spacer(1, 0.2 * inch))

    # ----- Bill to -----
    story.append(Paragraph('Bill To:', styles['body']))
    story.append(Paragraph(f'<b>{escape(client.name)}</b>', styles['body']))
    for line in (client.contact_person, client.billing_address, client.email, client.phone):
        if line:
            story.append(Paragraph(escape(line).replace('\n', '<br/>'), styles['small']))
    if client.gstin:
        story.append(Paragraph(f'GSTIN: {escape(client.gstin)}', styles['small']))
    story.append(Spacer(1, 0.2 * inch))

    # ----- Items and totals -----
    story.append(_items_table(items, company['currency'], frame_width, styles))
    story.append(Spacer(1, 0.12 * inch))
    story.append(KeepTogether([_totals_box(record, company['currency'])]))

    if record.notes:
        story.append(Paragraph('Notes', styles['heading']))
        story.append(Paragraph(escape(record.notes).replace('\n', '<br/>'), styles['body']))
    if record.terms_and_conditions:
        story.append(Paragraph('Terms &amp; Conditions', styles['heading']))
        story.append(Paragraph(escape(record.terms_and_conditions).replace('\n', '<br/>'), styles['body']))

    for name, builder in (('bom', _bom_section), ('sla', _sla_section), ('timeline', _timeline_section)):
        data = (sections or {}).get(name)
        if data:
            story.extend(builder(data, frame_width, styles))

    doc.build(story)
    buffer.seek(0)
    return buffer.getvalue()


class PdfService:
    @staticmethod
    def render_quote(quote):
        created = quote.quote_date.strftime('%d/%m/%Y') if quote.quote_date else '—'
        valid_until = quote.valid_until.strftime('%d/%m/%Y') if quote.valid_until else '—'
        meta = [
            (f'Quote No: <b>{escape(quote.quote_number)}</b>', f'Date: <b>{created}</b>'),
            (f'Reference: {escape(quote.reference_number or "—")}', f'Valid until: <b>{valid_until}</b>'),
        ]
        if quote.attention_to:
            meta.append((f'Attention: {escape(quote.attention_to)}', ''))
        sections = {name: quote.section(name) for name in ('bom', 'sla', 'timeline')}
        pdf = _build_document('Quotation', quote.quote_number, meta, quote.client, quote,
                              quote.items.all(), sections)
        logger.debug('Rendered quote %s (%d bytes)', quote.quote_number, len(pdf))
        return pdf

    @staticmethod
    def render_invoice(invoice):
        quote = invoice.quote
        meta = [
            (f'Invoice No: <b>{escape(invoice.invoice_number)}</b>',
             f"Date: <b>{invoice.invoice_date.strftime('%d/%m/%Y')}</b>"),
            (f'Quote: {escape(quote.quote_number)}',
             f"Due: <b>{invoice.due_date.strftime('%d/%m/%Y')}</b>"),
        ]
        sections = {name: quote.section(name) for name in ('bom', 'sla', 'timeline')}
        pdf = _build_document('Invoice', invoice.invoice_number, meta, invoice.client, invoice,
                              invoice.items.all(), sections)
        logger.debug('Rendered invoice %s (%d bytes)', invoice.invoice_number, len(pdf))
        return pdf

    @staticmethod
    def safe_filename(prefix, number):
        safe_number = "".join(c for c in number if c.isalnum() or c in '-_')
        return f'{prefix}_{safe_number}.pdf'
