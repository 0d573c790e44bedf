"""Customer ledger: customers keyed by phone number."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from pos.exceptions import ValidationError, CustomerNotFound, StorageError
from pos.models import Customer, CustomerStatus
from pos.utils.formatters import to_decimal, to_storage

logger = logging.getLogger(__name__)

DOB_STORAGE_FORMAT = '%Y-%m-%d'
DOB_DISPLAY_FORMAT = '%d-%m-%Y'


def parse_dob(value: Optional[str]) -> Optional[str]:
    """
    Normalize a date of birth to YYYY-MM-DD.
    
    Accepts YYYY-MM-DD or DD-MM-YYYY; blank returns None.
    
    Raises:
        ValidationError: any other format
    """
    if value is None or not str(value).strip():
        return None
    
    trimmed = str(value).strip()
    for fmt in (DOB_STORAGE_FORMAT, DOB_DISPLAY_FORMAT):
        try:
            return datetime.strptime(trimmed, fmt).strftime(DOB_STORAGE_FORMAT)
        except ValueError:
            continue
    raise ValidationError(f'Invalid date of birth: {trimmed}. Use DD-MM-YYYY (e.g., 10-02-1975)')


def format_dob(dob: Optional[str]) -> str:
    """Display form DD-MM-YYYY; unparseable values are shown as stored."""
    if not dob:
        return '-'
    try:
        return datetime.strptime(dob, DOB_STORAGE_FORMAT).strftime(DOB_DISPLAY_FORMAT)
    except ValueError:
        return dob


def _clean_customer_data(data: dict) -> dict:
    """Extract and sanitize customer fields."""
    phone = (data.get('phone') or '').strip()
    name = (data.get('name') or '').strip()
    if not phone:
        raise ValidationError('Customer phone is required')
    if not name:
        raise ValidationError('Customer name is required')
    
    status = (data.get('status') or CustomerStatus.ACTIVE.value).strip()
    if status not in (CustomerStatus.ACTIVE.value, CustomerStatus.DISACTIVE.value):
        raise ValidationError(f'Invalid customer status: {status}')
    
    try:
        credit_limit = to_storage(to_decimal(data.get('credit_limit')))
    except ValueError:
        raise ValidationError(f"Invalid credit limit: {data.get('credit_limit')!r}")
    
    return {
        'phone': phone,
        'name': name,
        'address': (data.get('address') or '').strip() or None,
        'dob': parse_dob(data.get('dob')),
        'email': (data.get('email') or '').strip() or None,
        'status': status,
        'credit_limit': credit_limit,
    }


def list_customers(session) -> List[Customer]:
    """All customers ordered by name."""
    return session.query(Customer).order_by(Customer.name).all()


def find_by_phone(session, phone: str) -> Optional[Customer]:
    if not phone:
        return None
    return session.get(Customer, phone.strip())


def upsert_customer(session, data: dict) -> Customer:
    """
    Update the customer with this phone; insert it when no row was updated.
    
    Calling it twice with the same data leaves a single row with those values.
    """
    cleaned = _clean_customer_data(data)
    phone = cleaned['phone']
    values = {k: v for k, v in cleaned.items() if k != 'phone'}
    
    try:
        updated = session.query(Customer).filter(
            Customer.phone == phone
        ).update(values, synchronize_session='fetch')
        
        if updated == 0:
            session.add(Customer(**cleaned))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f"Error saving customer {phone}")
        raise StorageError(f'Could not save customer {phone}: {e}') from e
    
    logger.info(f"Customer {'updated' if updated else 'created'}: {phone}")
    return session.get(Customer, phone)


def deactivate_customer(session, phone: str) -> Customer:
    """Soft-disable a customer."""
    customer = find_by_phone(session, phone)
    if customer is None:
        raise CustomerNotFound(phone)
    
    try:
        customer.status = CustomerStatus.DISACTIVE.value
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f'Could not deactivate customer {phone}: {e}') from e
    
    logger.info(f"Customer deactivated: {phone}")
    return customer


def customer_to_dict(customer: Customer) -> dict:
    return {
        'phone': customer.phone,
        'name': customer.name,
        'address': customer.address,
        'dob': customer.dob,
        'email': customer.email,
        'status': customer.status,
        'credit_limit': float(customer.credit_limit),
    }
