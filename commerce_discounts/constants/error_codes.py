# commerce_discounts/constants/error_codes.py


class ErrorCode:
    # ---------------- ENGINE ----------------
    INVALID_ARGUMENT_TYPE = "INVALID_ARGUMENT_TYPE"
    DISCOUNT_TYPE_NOT_FOUND = "DISCOUNT_TYPE_NOT_FOUND"

    # ---------------- DISCOUNTS ----------------
    DISCOUNT_CODE_EXISTS = "DISCOUNT_CODE_EXISTS"
    DISCOUNT_INVALID_RANGE = "DISCOUNT_INVALID_RANGE"
    DISCOUNT_INVALID_VALUE = "DISCOUNT_INVALID_VALUE"
    DISCOUNT_USAGE_LIMIT_REACHED = "DISCOUNT_USAGE_LIMIT_REACHED"
