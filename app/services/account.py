"""
Taste Palette API - Account Service.

Account deletion across every collection a user owns.
"""

import logging

from pymongo.errors import PyMongoError

from database import Database
from app.models.mongodb import USER_OWNED_MODELS, UserDocument
from app.utils.errors import PersistenceError

logger = logging.getLogger(__name__)


async def delete_account(user: UserDocument, reason: str) -> None:
    """
    Delete a user and everything it owns in one transaction.

    Taste profile, menu uploads, visits, ratings, sessions and linked
    accounts go first, then the user. Either all of them are deleted or
    none are.

    Args:
        user: Account to delete.
        reason: Reason given by the user, logged for product feedback.

    Raises:
        PersistenceError: The transaction failed and was rolled back.
    """
    logger.info(f"Deleting account {user.id} ({user.email}); reason: {reason}")

    try:
        async with Database.transaction() as session:
            for model in USER_OWNED_MODELS:
                await model.find(model.user_id == user.id, session=session).delete(session=session)
            await user.delete(session=session)
    except PyMongoError as e:
        logger.error(f"Account deletion failed for {user.id}: {e}")
        raise PersistenceError("Failed to delete account") from e

    logger.info(f"Account {user.id} deleted")
