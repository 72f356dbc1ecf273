"""
Error taxonomy shared by the routes.

Every failure a route can report is one of these. The app renders them as
``{"error": message}`` with the class status code; the checkout routes render
them as ``{"status": "error", "message": message}`` instead.
"""


class ShopError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(ShopError):
    status_code = 401


class Forbidden(ShopError):
    status_code = 403


class ValidationFailed(ShopError):
    status_code = 400


class UpstreamError(ShopError):
    """The data store, identity service or payment processor failed."""
    status_code = 500


class InternalError(ShopError):
    status_code = 500
