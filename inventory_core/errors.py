"""Domain errors raised by the inventory services.

Every error carries a message that can be shown to the operator as-is. The
Flask app maps each class to an HTTP status through ``status_code``.
"""


class InventoryError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidDataError(InventoryError):
    status_code = 400


class NotFoundError(InventoryError):
    status_code = 404

    def __init__(self, entity, record_id):
        super().__init__(f"{entity} not found: {record_id}")
        self.entity = entity
        self.record_id = record_id


class DuplicateSkuError(InventoryError):
    status_code = 409

    def __init__(self, sku):
        super().__init__(f"Product with SKU {sku} already exists.")
        self.sku = sku


class DuplicateCategoryError(InventoryError):
    status_code = 409

    def __init__(self, name):
        super().__init__(f'Category "{name}" already exists.')
        self.name = name


class CategoryInUseError(InventoryError):
    status_code = 409

    def __init__(self, name):
        super().__init__(
            f'Cannot delete category "{name}" as it is currently in use by one or more products.'
        )
        self.name = name


class InsufficientStockError(InventoryError):
    status_code = 409

    def __init__(self, item_name, available, requested):
        super().__init__(
            f"Not enough stock for {item_name}. Available: {available}, Requested: {requested}."
        )
        self.item_name = item_name
        self.available = available
        self.requested = requested


class DuplicateUserError(InventoryError):
    status_code = 409

    def __init__(self, email):
        super().__init__("A user with this email already exists.")
        self.email = email


class InvalidCredentialsError(InventoryError):
    status_code = 401

    def __init__(self):
        super().__init__("Invalid email or password.")
