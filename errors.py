"""
Business failures of the canteen API.

All of them reach the client as HTTP 200 with {"success": false, "message"}.
"""


class CanteenError(Exception):
    default_message = "Request failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCoupon(CanteenError):
    default_message = "Invalid Coupon Code"


class MinOrderNotMet(CanteenError):
    """Cart total is below the coupon's minimum order."""

    def __init__(self, min_order):
        self.min_order = min_order
        super().__init__(f"Min order ₹{min_order:g} required!")


class InsufficientStock(CanteenError):
    def __init__(self, name, remaining):
        self.name = name
        self.remaining = remaining
        super().__init__(f"Oops! Only {remaining} left of {name}.")


class ValidationFailed(CanteenError):
    default_message = "Missing or invalid fields"


class AuthFailure(CanteenError):
    default_message = "Invalid credentials"


class ServerError(CanteenError):
    default_message = "Server Error"
