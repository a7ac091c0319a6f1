class CoreError(Exception):
    """Base class for every exception raised by the core layer."""
    status_code = 400

    def __init__(self, message="The request could not be processed."):
        self.message = message
        super().__init__(self.message)


class InvalidDataError(CoreError):
    """Raised when the supplied data fails a business rule."""
    def __init__(self, message="The supplied data is invalid."):
        super().__init__(message)

# ===============================================
# PERSISTENCE AND ENTITY ERRORS
# ===============================================

class NotFoundError(CoreError):
    """Raised when a requested record does not exist."""
    status_code = 404

    def __init__(self, message="The requested item was not found."):
        super().__init__(message)

class ProductNotFoundError(NotFoundError):
    def __init__(self, message="Product not found"):
        super().__init__(message)

class OrderNotFoundError(NotFoundError):
    def __init__(self, message="Order not found"):
        super().__init__(message)

class AccountNotFoundError(NotFoundError):
    def __init__(self, message="User with this email does not exist"):
        super().__init__(message)

class ConflictError(CoreError):
    """Raised when a write would break a uniqueness rule."""
    status_code = 409

    def __init__(self, message="An account with this email already exists."):
        super().__init__(message)

# ===============================================
# ACCESS ERRORS
# ===============================================

class NotAuthorizedError(CoreError):
    """Raised when the caller may not act on the target record."""
    status_code = 403

    def __init__(self, message="Not authorized"):
        super().__init__(message)

class InvalidCredentialsError(CoreError):
    status_code = 401

    def __init__(self, message="Incorrect password"):
        super().__init__(message)

# ===============================================
# ORDER FLOW AND EXTERNAL SERVICES
# ===============================================

class InvalidTransitionError(CoreError):
    """Raised when an order status change is not allowed from its current state."""
    def __init__(self, message="This status change is not allowed."):
        super().__init__(message)

class ImageUploadError(CoreError):
    """Raised when the image host rejects or fails an upload."""
    def __init__(self, message="Image upload failed.", status_code=502):
        self.status_code = status_code
        super().__init__(message)
