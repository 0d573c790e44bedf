"""Reports blueprint: aggregates over sales and payments."""
from typing import Any, Dict
from flask import Blueprint, request, g
from pos.database import get_session
from pos.middleware import require_login, require_admin, actor_scope
from pos.services import report_service
from pos.utils.formatters import money

reports_bp = Blueprint('reports', __name__, url_prefix='/reports')


def _period() -> str:
    return request.args.get('filter', report_service.PERIOD_TODAY)


@reports_bp.route('/stats', methods=['GET'])
@require_login
def stats() -> Dict[str, Any]:
    period = _period()
    result = report_service.get_stats_for_period(get_session(), period, actor_scope())
    return {'filter': period, 'stats': result.to_dict()}


@reports_bp.route('/cash', methods=['GET'])
@require_login
def cash() -> Dict[str, Any]:
    """Cash taken by the logged-in user in the period."""
    period = _period()
    amount = report_service.cash_total_for_user(get_session(), period, g.user.username)
    return {'filter': period, 'username': g.user.username, 'cash': money(amount)}


@reports_bp.route('/monthly', methods=['GET'])
@require_admin
def monthly() -> Dict[str, Any]:
    return {'monthly': report_service.monthly_stats(get_session()).to_dict()}


@reports_bp.route('/payment-methods', methods=['GET'])
@require_admin
def payment_methods() -> Dict[str, Any]:
    rows = report_service.payment_method_summary(get_session())
    return {'methods': [row.to_dict() for row in rows]}


@reports_bp.route('/users', methods=['GET'])
@require_admin
def users() -> Dict[str, Any]:
    period = _period()
    rows = report_service.user_sales_summaries(get_session(), period)
    return {'filter': period, 'users': [row.to_dict() for row in rows]}
