# storeapi/errors.py
from typing import Optional

# Every failure a handler can surface. The HTTP layer renders these as
# {"message": ...} with the class status code.


class StoreError(Exception):
    status_code = 500
    message = "internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailure(StoreError):
    status_code = 400
    message = "validation failed"


class Conflict(StoreError):
    status_code = 409
    message = "conflict"


class DuplicateUsername(Conflict):
    message = "username is already taken"


class DuplicateProduct(Conflict):
    message = "a product with this name already exists"


class NotFound(StoreError):
    status_code = 404
    message = "not found"


class UserNotFound(NotFound):
    message = "user not found"


class ProductNotFound(NotFound):
    message = "product not found"


class Unauthenticated(StoreError):
    status_code = 401
    message = "unauthorized"


class InvalidCredentials(Unauthenticated):
    message = "invalid username or password"


class InvalidToken(StoreError):
    status_code = 403
    message = "invalid token"


class StorageFailure(StoreError):
    status_code = 500
    message = "storage failure"
