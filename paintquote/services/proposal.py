# paintquote/services/proposal.py
from io import BytesIO
from xml.sax.saxutils import escape
from flask import make_response
from reportlab.lib.pagesizes import letter
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib import colors
import logging

from .quote_numbers import local_now

logger = logging.getLogger(__name__)

UNIT_LABELS = {
    'sqft': 'sq ft',
    'linear_foot': 'lin ft',
    'unit': 'ea',
    'hour': 'hr',
}


def _money(value):
    return f"${value or 0:,.2f}"


def _percent(value):
    return f"{value or 0:g}%"


def _text(value, default=''):
    # Paragraph markup is XML; customer-entered text must not break it
    return escape(str(value)) if value else default


def build_quote_proposal(quote, calculation, company):
    """Render the proposal PDF and return its bytes."""
    breakdown = calculation.breakdown
    buffer = BytesIO()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=72,
        leftMargin=72,
        topMargin=72,
        bottomMargin=72
    )
    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'TitleStyle',
        parent=styles['Heading1'],
        fontSize=24,
        leading=30,
        alignment=1,
        spaceAfter=24
    )
    section_title_style = ParagraphStyle(
        'SectionTitle',
        parent=styles['Heading2'],
        fontSize=14,
        leading=18,
        spaceBefore=12,
        spaceAfter=6,
        textColor=colors.darkblue
    )
    normal_style = ParagraphStyle(
        'CustomNormal',
        parent=styles['Normal'],
        fontSize=10,
        leading=14,
        spaceAfter=3
    )
    bold_style = ParagraphStyle(
        'BoldText',
        parent=normal_style,
        fontName='Helvetica-Bold'
    )

    elements.append(Paragraph("PAINTING PROPOSAL", title_style))

    tier_label = f"{calculation.tier.title()} package" if calculation.tier else "Standard package"
    header_table = Table([
        [Paragraph(f"Proposal #: {quote.quote_number or quote.id}", normal_style)],
        [Paragraph(f"Date: {local_now().strftime('%B %d, %Y')}", normal_style)],
        [Paragraph(tier_label, normal_style)],
    ], colWidths=[450])
    header_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]))
    elements.append(header_table)
    elements.append(Spacer(1, 0.1*inch))

    company_table = Table([
        [Paragraph(f"<b>{_text(company['name'])}</b>", bold_style),
         Paragraph("<b>Prepared For:</b>", bold_style)],
        [Paragraph(_text(company['address']), normal_style),
         Paragraph(_text(quote.customer_name, 'Customer'), bold_style)],
        [Paragraph(f"Phone: {company['phone']}", normal_style),
         Paragraph(_text(quote.job_address, 'Address on file'), normal_style)],
        [Paragraph(f"Email: {company['email']}", normal_style),
         Paragraph(f"Phone: {_text(quote.customer_phone, 'N/A')}", normal_style)],
        [Paragraph(f"License: {company['license']}", normal_style),
         Paragraph(f"Email: {_text(quote.customer_email, 'N/A')}", normal_style)],
    ], colWidths=[225, 225])
    company_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    elements.append(company_table)
    elements.append(Spacer(1, 0.3*inch))

    # Scope of work
    elements.append(Paragraph("Scope of Work", section_title_style))
    scope_data = [["Area", "Surface", "Quantity", "Coats"]]
    for line in calculation.line_items:
        unit = UNIT_LABELS.get(line.unit, line.unit)
        scope_data.append([
            line.area,
            line.category,
            f"{line.quantity:,.0f} {unit}",
            f"{line.coats:g}" if line.coats else "",
        ])

    scope_table = Table(scope_data, colWidths=[140, 150, 100, 60])
    scope_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.darkblue),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('PADDING', (0, 0), (-1, -1), 6),
        ('ALIGN', (2, 1), (3, -1), 'RIGHT'),
        ('LINEBELOW', (0, 1), (-1, -1), 0.5, colors.lightgrey),
    ]))
    elements.append(scope_table)
    elements.append(Spacer(1, 0.3*inch))

    # Investment summary
    elements.append(Paragraph("Investment Summary", section_title_style))
    price_data = [
        ["Description", "Amount"],
        ["Labor", _money(breakdown.labor_total)],
        ["Materials", _money(breakdown.material_cost)],
    ]
    if breakdown.material_markup_amount:
        price_data.append([
            f"Material markup ({_percent(breakdown.material_markup_percent)})",
            _money(breakdown.material_markup_amount),
        ])
    if breakdown.overhead:
        price_data.append([f"Overhead ({_percent(breakdown.overhead_percent)})", _money(breakdown.overhead)])
    if breakdown.profit_amount:
        price_data.append([f"Profit ({_percent(breakdown.profit_margin_percent)})", _money(breakdown.profit_amount)])
    price_data.append(["Subtotal:", _money(breakdown.subtotal)])
    price_data.append([f"Tax ({_percent(breakdown.tax_percent)}):", _money(breakdown.tax)])
    price_data.append(["Total Investment:", _money(breakdown.total)])

    price_table = Table(price_data, colWidths=[325, 125])
    price_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.darkblue),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('PADDING', (0, 0), (-1, -1), 6),
        ('GRID', (0, 0), (-1, 0), 1, colors.darkblue),
        ('ALIGN', (1, 1), (1, -1), 'RIGHT'),
        ('LINEBELOW', (0, -4), (-1, -4), 1, colors.lightgrey),
        ('LINEBELOW', (0, -2), (-1, -2), 1, colors.black),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('TEXTCOLOR', (0, -1), (-1, -1), colors.darkblue),
    ]))
    elements.append(price_table)
    elements.append(Spacer(1, 0.3*inch))

    elements.append(Paragraph("Terms and Conditions", section_title_style))
    terms_style = ParagraphStyle(
        'TermsStyle',
        parent=normal_style,
        leftIndent=10,
        firstLineIndent=-10
    )
    elements.append(Paragraph(
        f"1. Payment Terms: {_percent(breakdown.deposit_percent)} deposit ({_money(breakdown.deposit)}) "
        f"required to schedule work. Remaining balance of {_money(breakdown.balance)} due upon completion.",
        terms_style,
    ))
    elements.append(Paragraph("2. Surface preparation, masking and cleanup are included in the price.", terms_style))
    elements.append(Paragraph("3. Colors are to be selected by the customer before work begins.", terms_style))
    elements.append(Paragraph("4. This proposal is valid for 30 days from the date issued.", terms_style))
    elements.append(Spacer(1, 0.4*inch))

    signature_table = Table([
        ["Approved By:", "Date:"],
        ["", ""],
        [quote.customer_name or '', ""]
    ], colWidths=[225, 225])
    signature_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, 0), 'LEFT'),
        ('FONTNAME', (0, 0), (1, 0), 'Helvetica-Bold'),
        ('LINEBELOW', (0, 1), (0, 1), 1, colors.black),
        ('LINEBELOW', (1, 1), (1, 1), 1, colors.black),
        ('TOPPADDING', (0, 1), (1, 1), 36),
        ('BOTTOMPADDING', (0, 1), (1, 1), 6),
    ]))
    elements.append(signature_table)
    elements.append(Spacer(1, 0.5*inch))

    footer_style = ParagraphStyle(
        'FooterStyle',
        parent=normal_style,
        alignment=1,
        textColor=colors.darkgrey,
        fontSize=9
    )
    elements.append(Paragraph("Thank you for the opportunity to earn your business!", footer_style))
    elements.append(Paragraph(_text(company['name']), footer_style))

    doc.build(elements)
    buffer.seek(0)
    return buffer.getvalue()


def generate_quote_proposal(quote, calculation, company):
    """Generate a PDF proposal response for a priced quote"""
    try:
        pdf = build_quote_proposal(quote, calculation, company)

        response = make_response(pdf)
        response.headers['Content-Type'] = 'application/pdf'
        response.headers['Content-Disposition'] = f'inline; filename=proposal_{quote.quote_number or quote.id}.pdf'
        return response

    except Exception as e:
        logger.error(f"Error generating proposal for quote {quote.id}: {str(e)}")
        raise


def company_from_config(app_config):
    return {
        'name': app_config.get('COMPANY_NAME', ''),
        'address': app_config.get('COMPANY_ADDRESS', ''),
        'phone': app_config.get('COMPANY_PHONE', ''),
        'email': app_config.get('COMPANY_EMAIL', ''),
        'license': app_config.get('COMPANY_LICENSE', ''),
    }
