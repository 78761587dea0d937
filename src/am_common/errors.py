"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User (1403 = generic ownership/role failure)
  2xxx: Entity lookup, input validation, approval decisions
  3xxx: Auction lifecycle / bidding
  4xxx: Payment / shipment
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class AuthenticationRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Authentication required", 401)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid email or password", 401)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Refresh token is invalid or expired", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Email already exists", 409)


class ProfileProvisioningError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(
            1006, f"Account was not created: profile provisioning failed ({detail})", 500
        )


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(1403, detail, 403)


# --- 2xxx: Lookup / validation / approval ---

class NotFoundError(AppError):
    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(2001, f"{entity} not found: {entity_id}", 404)


class AuctionNotFoundError(NotFoundError):
    def __init__(self, auction_id: str) -> None:
        super().__init__("Auction", auction_id)


class ValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, detail, 422)


class AlreadyDecidedError(AppError):
    def __init__(self, auction_id: str, approval_status: str) -> None:
        super().__init__(
            2003, f"Auction {auction_id} was already {approval_status}", 409
        )


# --- 3xxx: Auction lifecycle / bidding ---

class AuctionNotBiddableError(AppError):
    def __init__(self, auction_id: str, reason: str) -> None:
        super().__init__(3001, f"Auction {auction_id} is not open for bids: {reason}", 422)


class BidTooLowError(AppError):
    def __init__(self, amount: int, current_price: int) -> None:
        super().__init__(
            3002,
            f"Bid of {amount} must be greater than the current price {current_price}",
            409,
        )
        self.amount = amount
        self.current_price = current_price


class AuctionNotClosableError(AppError):
    def __init__(self, auction_id: str, reason: str) -> None:
        super().__init__(3003, f"Auction {auction_id} cannot be closed: {reason}", 409)


class AuctionNotCancellableError(AppError):
    def __init__(self, auction_id: str, reason: str) -> None:
        super().__init__(3004, f"Auction {auction_id} cannot be cancelled: {reason}", 409)


# --- 4xxx: Payment / shipment ---

class PaymentNotConfirmedError(AppError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(
            4001, f"Auction {auction_id} must have a winner and a confirmed payment", 409
        )


class PaymentAlreadyCompletedError(AppError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(4002, f"Auction {auction_id} is already paid", 409)


class InvalidSignatureError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "Invalid webhook signature", 401)


class UpstreamProviderError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4004, f"Payment provider error: {detail}", 502)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
