# Masters
from commerce_discounts.models.masters.channel_models import Channel
from commerce_discounts.models.masters.customer_group_models import CustomerGroup
from commerce_discounts.models.masters.discount_models import (
    Discount,
    DiscountChannel,
    DiscountCustomerGroup,
    DiscountPurchasable,
    DiscountUser,
    DiscountCollection,
    DiscountBrand,
)

# Support
from commerce_discounts.models.support.activity_models import DiscountActivity
