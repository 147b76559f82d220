"""
Transactional writes.

Inserts and updates that touch more than one document (a record and its RLS
grant, a record and its images) run inside one MongoDB transaction. The
client session is acquired when the block starts and released when it
commits or aborts; it never outlives the block.

Usage:
    async with transaction(client, operation="insert", collection="projects") as session:
        await projects.insert_one(doc, session=session)
        await readers.insert_one(grant, session=session)
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession
from pymongo.errors import PyMongoError

from ..exceptions import PersistenceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transaction(
    client: AsyncIOMotorClient,
    operation: str,
    collection: str,
    **context: Any,
) -> AsyncIterator[AsyncIOMotorClientSession]:
    """
    Run the enclosed writes atomically.

    Exceptions raised inside the block abort the transaction. Driver errors
    are logged here and re-raised as ``PersistenceError``; any other
    exception (e.g. an access check) propagates unchanged after the abort.

    Raises:
        PersistenceError: If the store fails to start, run or commit
    """
    try:
        async with await client.start_session() as session:
            async with session.start_transaction():
                yield session
    except PyMongoError as e:
        logger.exception(
            f"Transaction failed for {operation} on '{collection}'",
            extra={"operation": operation, "collection": collection, **context},
        )
        raise PersistenceError(
            f"Failed to {operation} document",
            operation=operation,
            collection=collection,
            context=dict(context),
        ) from e
