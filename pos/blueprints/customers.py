"""Customers blueprint."""
from typing import Any, Dict
from flask import Blueprint
from pos.database import get_session
from pos.exceptions import CustomerNotFound
from pos.middleware import require_login
from pos.services import customer_service
from pos.blueprints._helpers import json_body

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')


@customers_bp.route('', methods=['GET'])
@require_login
def list_customers() -> Dict[str, Any]:
    customers = customer_service.list_customers(get_session())
    return {'customers': [customer_service.customer_to_dict(c) for c in customers]}


@customers_bp.route('', methods=['POST'])
@require_login
def save_customer() -> Dict[str, Any]:
    customer = customer_service.upsert_customer(get_session(), json_body())
    return {'customer': customer_service.customer_to_dict(customer)}


@customers_bp.route('/<phone>', methods=['GET'])
@require_login
def get_customer(phone: str) -> Dict[str, Any]:
    customer = customer_service.find_by_phone(get_session(), phone)
    if customer is None:
        raise CustomerNotFound(phone)
    return {'customer': customer_service.customer_to_dict(customer)}


@customers_bp.route('/<phone>/deactivate', methods=['POST'])
@require_login
def deactivate_customer(phone: str) -> Dict[str, Any]:
    customer = customer_service.deactivate_customer(get_session(), phone)
    return {'customer': customer_service.customer_to_dict(customer)}
