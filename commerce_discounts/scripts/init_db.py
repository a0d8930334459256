import asyncio
import logging
import os

from sqlalchemy import select

from commerce_discounts.core.db import AsyncSessionLocal, init_models
from commerce_discounts.core.logging import setup_logging
from commerce_discounts.models import Channel, CustomerGroup

logger = logging.getLogger(__name__)


async def init_db():
    await init_models()

    async with AsyncSessionLocal() as session:
        channel_handle = os.getenv("DEFAULT_CHANNEL_HANDLE", "webstore")
        group_handle = os.getenv("DEFAULT_CUSTOMER_GROUP_HANDLE", "retail")

        if not await session.scalar(select(Channel.id).where(Channel.handle == channel_handle)):
            session.add(Channel(name=channel_handle.title(), handle=channel_handle, default=True))
            logger.info("Default channel created", extra={"handle": channel_handle})

        if not await session.scalar(select(CustomerGroup.id).where(CustomerGroup.handle == group_handle)):
            session.add(CustomerGroup(name=group_handle.title(), handle=group_handle, default=True))
            logger.info("Default customer group created", extra={"handle": group_handle})

        await session.commit()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_db())
