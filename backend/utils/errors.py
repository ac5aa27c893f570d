class FactoryOpsError(Exception):
    """Base class for domain errors. ``status_code`` is the HTTP status the API answers with."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(FactoryOpsError):
    status_code = 404


class InvalidState(FactoryOpsError):
    status_code = 400


class AlreadyCompleted(InvalidState):
    def __init__(self, order_id: str):
        super().__init__("Order already completed")
        self.order_id = order_id


class InsufficientStock(InvalidState):
    def __init__(self, material_id: str, required: float, available: float):
        super().__init__(
            f"Insufficient stock for material {material_id}. Required: {required}, Available: {available}"
        )
        self.material_id = material_id
        self.required = required
        self.available = available
