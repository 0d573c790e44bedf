"""Invoice PDF rendering."""
import logging
import os
from io import BytesIO
from typing import Any, Dict, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER
from xml.sax.saxutils import escape

from pos.services.invoice_service import InvoiceData
from pos.utils.formatters import money, quantity

logger = logging.getLogger(__name__)


def render_invoice_pdf(invoice: InvoiceData, business_info: Optional[Dict[str, Any]] = None) -> BytesIO:
    """Render an invoice projection to an in-memory PDF."""
    business_info = business_info or {}
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.75*inch,
        leftMargin=0.75*inch,
        topMargin=0.75*inch,
        bottomMargin=0.75*inch,
        title=f"Invoice #{invoice.invoice_no}"
    )
    
    elements = []
    styles = getSampleStyleSheet()
    
    title_style = ParagraphStyle(
        'InvoiceTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=colors.HexColor('#2C3E50'),
        spaceAfter=12,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold'
    )
    header_style = ParagraphStyle(
        'InvoiceHeader',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#7F8C8D'),
        alignment=TA_CENTER,
        spaceAfter=6
    )
    
    # 1. Title and business header
    elements.append(Paragraph("INVOICE", title_style))
    if business_info.get('name'):
        elements.append(Paragraph(f"<b>{escape(business_info['name'])}</b>", header_style))
    if business_info.get('address'):
        elements.append(Paragraph(escape(business_info['address']), header_style))
    if business_info.get('phone'):
        elements.append(Paragraph(f"Tel: {escape(business_info['phone'])}", header_style))
    elements.append(Spacer(1, 0.3*inch))
    
    # 2. Invoice metadata
    info_data = [
        ['Invoice No:', str(invoice.invoice_no)],
        ['Date:', invoice.date],
        ['Customer:', invoice.customer_name],
        ['Phone:', invoice.customer_phone or '-'],
        ['Payment:', invoice.payment_method],
    ]
    info_table = Table(info_data, colWidths=[1.5*inch, 3.5*inch])
    info_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
        ('ALIGN', (1, 0), (1, -1), 'LEFT'),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 0), (-1, -1), colors.HexColor('#34495E')),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.3*inch))
    
    # 3. Items
    table_data = [['Code', 'Description', 'Qty', 'Price', 'Total']]
    for item in invoice.items:
        table_data.append([
            item.code,
            item.description,
            quantity(item.qty),
            money(item.price),
            money(item.total),
        ])
    items_table = Table(table_data, colWidths=[1*inch, 2.9*inch, 0.8*inch, 1*inch, 1*inch], repeatRows=1)
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#3498DB')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#BDC3C7')),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#ECF0F1')]),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))
    
    # 4. Totals
    totals_data = [
        ['Subtotal:', money(invoice.subtotal)],
        ['Tax:', money(invoice.tax)],
        ['TOTAL:', money(invoice.total)],
        ['Paid:', money(invoice.paid_amount)],
        ['Balance:', money(invoice.balance)],
    ]
    totals_table = Table(totals_data, colWidths=[5.7*inch, 1*inch])
    totals_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('FONTNAME', (0, 2), (-1, 2), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 2), (-1, 2), 13),
        ('TEXTCOLOR', (0, 2), (-1, 2), colors.HexColor('#27AE60')),
        ('LINEABOVE', (0, 2), (-1, 2), 1, colors.HexColor('#27AE60')),
    ]))
    elements.append(totals_table)
    elements.append(Spacer(1, 0.4*inch))
    
    footer_style = ParagraphStyle(
        'Footer', parent=styles['Normal'], fontSize=9,
        textColor=colors.HexColor('#95A5A6'), alignment=TA_CENTER
    )
    elements.append(Paragraph("Thank you for your business!", footer_style))
    
    doc.build(elements)
    buffer.seek(0)
    return buffer


def write_invoice_pdf(invoice: InvoiceData, directory: str,
                      business_info: Optional[Dict[str, Any]] = None) -> str:
    """Render and write invoice-<n>.pdf into directory; returns the absolute path."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.abspath(os.path.join(directory, f"invoice-{invoice.invoice_no}.pdf"))
    
    buffer = render_invoice_pdf(invoice, business_info)
    with open(path, 'wb') as fh:
        fh.write(buffer.getvalue())
    
    logger.info(f"Invoice PDF written: {path}")
    return path
