"""Catalog blueprint: products."""
from typing import Any, Dict, Tuple
from flask import Blueprint
from pos.database import get_session
from pos.exceptions import ProductNotFound
from pos.middleware import require_login
from pos.services import catalog_service
from pos.blueprints._helpers import json_body

catalog_bp = Blueprint('catalog', __name__, url_prefix='/products')


@catalog_bp.route('', methods=['GET'])
@require_login
def list_products() -> Dict[str, Any]:
    products = catalog_service.list_products(get_session())
    return {'products': [catalog_service.product_to_dict(p) for p in products]}


@catalog_bp.route('', methods=['POST'])
@require_login
def save_product() -> Tuple[Dict[str, Any], int]:
    """Upsert by code: an existing code updates that product."""
    product = catalog_service.upsert_by_code(get_session(), json_body())
    return {'product': catalog_service.product_to_dict(product)}, 200


@catalog_bp.route('/low-stock', methods=['GET'])
@require_login
def low_stock() -> Dict[str, Any]:
    products = catalog_service.low_stock(get_session())
    return {'products': [catalog_service.product_to_dict(p) for p in products]}


@catalog_bp.route('/<code>', methods=['GET'])
@require_login
def get_product(code: str) -> Dict[str, Any]:
    product = catalog_service.find_by_code(get_session(), code)
    if product is None:
        raise ProductNotFound(code)
    return {'product': catalog_service.product_to_dict(product)}
