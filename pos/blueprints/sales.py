"""Sales blueprint: sale capture and sale lists."""
from typing import Any, Dict, Tuple
from flask import Blueprint, request, g, current_app
from pos.database import get_session
from pos.exceptions import ValidationError
from pos.middleware import require_login, require_admin, actor_scope
from pos.services.sales_service import (
    SaleLineInput, CodeLineInput, create_sale, create_sale_by_code
)
from pos.services import report_service
from pos.utils.formatters import parse_date
from pos.blueprints._helpers import json_body, json_list, int_arg

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')


def _summaries(rows) -> Dict[str, Any]:
    return {'sales': [row.to_dict() for row in rows]}


@sales_bp.route('', methods=['POST'])
@require_login
def create() -> Tuple[Dict[str, Any], int]:
    """Create a sale from pre-resolved lines (product_id, quantity, price)."""
    data = json_body()
    lines = [SaleLineInput.from_dict(line) for line in json_list(data, 'lines')]
    sale_id = create_sale(
        get_session(),
        data.get('customer_phone'),
        lines,
        data.get('paid', 0),
        payment_method=data.get('method'),
        created_by=g.user.username,
    )
    return {'id': sale_id}, 201


@sales_bp.route('/by-code', methods=['POST'])
@require_login
def create_by_code() -> Tuple[Dict[str, Any], int]:
    """Create a sale from code-based lines; prices come from the catalog."""
    data = json_body()
    lines = [CodeLineInput.from_dict(line) for line in json_list(data, 'lines')]
    sale_id = create_sale_by_code(
        get_session(),
        data.get('customer_phone'),
        lines,
        data.get('paid', 0),
        payment_method=data.get('method'),
        created_by=g.user.username,
    )
    return {'id': sale_id}, 201


@sales_bp.route('/today', methods=['GET'])
@require_login
def today() -> Dict[str, Any]:
    return _summaries(report_service.daily_sales(get_session(), actor_scope()))


@sales_bp.route('', methods=['GET'])
@require_login
def list_sales() -> Dict[str, Any]:
    """List sales for ?filter=Today|This Month|All (default All), scoped for non-admins."""
    period = request.args.get('filter', report_service.PERIOD_ALL)
    scope = actor_scope()
    session = get_session()
    
    if period == report_service.PERIOD_TODAY:
        rows = report_service.daily_sales(session, scope)
    elif period == report_service.PERIOD_THIS_MONTH:
        rows = report_service.monthly_sales(session, scope)
    elif period == report_service.PERIOD_ALL:
        limit = int_arg('limit', current_app.config.get('RECENT_SALES_LIMIT', 100))
        rows = report_service.all_sales(session, limit=limit, created_by=scope)
    else:
        raise ValidationError(f'Invalid period filter: {period!r}')
    return _summaries(rows)


@sales_bp.route('/range', methods=['GET'])
@require_admin
def by_date_range() -> Dict[str, Any]:
    try:
        start = parse_date(request.args.get('start'))
        end = parse_date(request.args.get('end'))
    except ValueError as e:
        raise ValidationError(str(e))
    return _summaries(report_service.sales_by_date_range(get_session(), start, end))
