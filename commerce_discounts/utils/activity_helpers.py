from sqlalchemy.ext.asyncio import AsyncSession
from commerce_discounts.models.support.activity_models import DiscountActivity
from commerce_discounts.constants.activity_templates import ACTIVITY_TEMPLATES
from commerce_discounts.constants.activity_codes import ActivityCode


async def emit_activity(
    db: AsyncSession,
    *,
    discount_id: int | None,
    actor: str,
    code: ActivityCode,
    **context,
):
    template = ACTIVITY_TEMPLATES.get(code)
    if not template:
        raise ValueError(f"No activity template for code {code}")

    try:
        message = template.format(actor=actor, **context)
    except KeyError as e:
        raise ValueError(
            f"Missing activity context key: {e.args[0]} for {code}"
        )

    db.add(
        DiscountActivity(
            discount_id=discount_id,
            actor_snapshot=actor,
            code=code.value,
            message=message,
        )
    )
