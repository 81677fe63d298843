"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class ProductValidationError(Exception):
    """Raised when a field value is outside the domain of that field."""

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field} {reason}. Received: {value}")


class SimulatedServerError(Exception):
    """Raised for the reserved sentinel value to exercise the revert path.

    Surfaces to clients as a plain 500, indistinguishable from any other
    server failure.
    """

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Server rejected {field}={value}")


class TableRequestError(Exception):
    """Raised by the table API client on a non-2xx status or transport failure.

    ``status_code`` is 0 when no response was received at all.
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class MalformedResponse(Exception):
    """Raised when a response body does not have the expected fragment shape."""


class RequestSuperseded(Exception):
    """A newer action made this response irrelevant. Never user-visible."""

    def __init__(self, key: object, generation: int, current: int):
        self.key = key
        self.generation = generation
        self.current = current
        super().__init__(f"response #{generation} for {key} superseded by #{current}")
