"""Request parsing helpers shared by the JSON blueprints."""
from typing import Any, Dict, List
from flask import request
from pos.exceptions import ValidationError


def json_body() -> Dict[str, Any]:
    """Request JSON object; anything else is rejected."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Expected a JSON object body')
    return data


def json_list(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ValidationError(f"'{key}' must be a list of objects")
    return value


def int_arg(name: str, default: int) -> int:
    raw = request.args.get(name, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"'{name}' must be an integer")
