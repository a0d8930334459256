# commerce_discounts/models/enums/purchasable_scope.py
import enum

class PurchasableScope(str, enum.Enum):
    condition = "condition"
    limitation = "limitation"
    reward = "reward"
