# backend/exceptions.py
"""
Domain errors raised by the services.

Every error is an expected, caller-recoverable condition. Each class carries
a stable machine-readable ``code``, the HTTP status the API maps it to and a
``details`` dict with the structured data needed to render a message.

    WarehouseAppError
    +-- NotFoundError             NOT_FOUND              404
    +-- ConflictError             CONFLICT               409
    +-- InvalidArgumentError      INVALID_ARGUMENT       400
    +-- InsufficientStockError    INSUFFICIENT_STOCK     422
    +-- PreconditionFailedError   PRECONDITION_FAILED    412
    +-- AuthenticationFailedError AUTHENTICATION_FAILED  401

Infrastructure failures (database unavailable, etc.) are not wrapped.
"""


class WarehouseAppError(Exception):
    code = "WAREHOUSE_APP_ERROR"
    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        return {"detail": self.message, "code": self.code, **self.details}


class NotFoundError(WarehouseAppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity, entity_id):
        super().__init__(f"{entity} with ID {entity_id} not found", entity=entity, id=entity_id)
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(WarehouseAppError):
    code = "CONFLICT"
    status_code = 409

    def __init__(self, field, value, message=None):
        super().__init__(message or f"{field} '{value}' already exists", field=field, value=value)
        self.field = field
        self.value = value


class InvalidArgumentError(WarehouseAppError):
    code = "INVALID_ARGUMENT"
    status_code = 400

    def __init__(self, field, reason):
        super().__init__(f"Invalid {field}: {reason}", field=field, reason=reason)
        self.field = field
        self.reason = reason


class InsufficientStockError(WarehouseAppError):
    code = "INSUFFICIENT_STOCK"
    status_code = 422

    def __init__(self, product_id, warehouse_id, requested, available):
        super().__init__(
            f"Insufficient stock: requested {requested}, available {available}",
            product_id=product_id,
            warehouse_id=warehouse_id,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.warehouse_id = warehouse_id
        self.requested = requested
        self.available = available


class PreconditionFailedError(WarehouseAppError):
    code = "PRECONDITION_FAILED"
    status_code = 412

    def __init__(self, reason):
        super().__init__(reason, reason=reason)
        self.reason = reason


class AuthenticationFailedError(WarehouseAppError):
    code = "AUTHENTICATION_FAILED"
    status_code = 401

    def __init__(self, reason="Invalid credentials"):
        super().__init__(reason)
        self.reason = reason
