"""Invoices blueprint: invoice projection as JSON and PDF."""
from typing import Any, Dict
from flask import Blueprint, send_file, current_app, Response
from pos.database import get_session
from pos.middleware import require_login
from pos.services.invoice_service import build_invoice_data
from pos.services.invoice_pdf_service import render_invoice_pdf

invoices_bp = Blueprint('invoices', __name__, url_prefix='/invoices')


def business_info() -> Dict[str, Any]:
    return {
        'name': current_app.config.get('BUSINESS_NAME'),
        'address': current_app.config.get('BUSINESS_ADDRESS'),
        'phone': current_app.config.get('BUSINESS_PHONE'),
    }


@invoices_bp.route('/<int:sale_id>', methods=['GET'])
@require_login
def get_invoice(sale_id: int) -> Dict[str, Any]:
    return {'invoice': build_invoice_data(get_session(), sale_id).to_dict()}


@invoices_bp.route('/<int:sale_id>/pdf', methods=['GET'])
@require_login
def invoice_pdf(sale_id: int) -> Response:
    invoice = build_invoice_data(get_session(), sale_id)
    buffer = render_invoice_pdf(invoice, business_info())
    return send_file(
        buffer,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f'invoice-{sale_id}.pdf'
    )
