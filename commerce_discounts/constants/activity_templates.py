from commerce_discounts.constants.activity_codes import ActivityCode


ACTIVITY_TEMPLATES = {
    # ---------------- DISCOUNTS ----------------
    ActivityCode.CREATE_DISCOUNT:
        "{actor} created discount {target_name} ({target_code})",

    ActivityCode.REDEEM_DISCOUNT:
        "{actor} redeemed discount {target_name} ({target_code}): "
        "{uses} of {max_uses} uses",
}
