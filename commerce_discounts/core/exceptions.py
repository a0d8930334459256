from commerce_discounts.constants.error_codes import ErrorCode


class AppException(Exception):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        self.details = details


class InvalidArgumentType(AppException):
    def __init__(self, expected: str, received: str):
        super().__init__(
            400,
            f"Expected {expected}, received {received}",
            ErrorCode.INVALID_ARGUMENT_TYPE,
            {"expected": expected, "received": received},
        )


class StrategyNotFound(AppException):
    def __init__(self, type_identifier: str):
        super().__init__(
            422,
            f"Discount type '{type_identifier}' is not registered",
            ErrorCode.DISCOUNT_TYPE_NOT_FOUND,
            {"type": type_identifier},
        )
