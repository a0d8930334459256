# commerce_discounts/constants/activity_codes.py
import enum


class ActivityCode(str, enum.Enum):
    CREATE_DISCOUNT = "CREATE_DISCOUNT"
    REDEEM_DISCOUNT = "REDEEM_DISCOUNT"
