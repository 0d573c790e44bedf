"""Custom exceptions for the point-of-sale core."""


class PosError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class ValidationError(PosError):
    """Raised when input is rejected before any mutation."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class InvalidSale(ValidationError):
    """Raised when a sale as a whole cannot be accepted (e.g. empty cart)."""
    def __init__(self, message="Sale must have at least one line"):
        super().__init__(message)


class InvalidLine(ValidationError):
    """Raised for a cart line with a blank code or a non-positive quantity."""
    def __init__(self, code, quantity, reason=None):
        message = f"Invalid line: code='{code}', qty='{quantity}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, payload={'code': code, 'quantity': str(quantity)})
        self.code = code
        self.quantity = quantity


class NotFoundError(PosError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class ProductNotFound(NotFoundError):
    def __init__(self, code):
        super().__init__(f"Product not found: {code}", payload={'code': code})
        self.code = code


class CustomerNotFound(NotFoundError):
    def __init__(self, phone):
        super().__init__(f"Customer not found: {phone}", payload={'phone': phone})
        self.phone = phone


class InvoiceNotFound(NotFoundError):
    def __init__(self, sale_id):
        super().__init__(f"Invoice not found: {sale_id}", payload={'sale_id': sale_id})
        self.sale_id = sale_id


class StateError(PosError):
    """Raised when persisted data is in a state that should be unreachable."""
    def __init__(self, message, payload=None):
        super().__init__(message, 500, payload)


class InvalidState(StateError):
    """Raised when a resolved product carries no persisted identity."""


class StorageError(PosError):
    """Raised when the embedded store fails; the session has been rolled back."""
    def __init__(self, message="Storage failure"):
        super().__init__(message, 500)


class UnauthorizedError(PosError):
    """Raised when a request lacks a valid login or role."""
    def __init__(self, message="Unauthorized access", status_code=401):
        super().__init__(message, status_code)
