from pymongo import AsyncMongoClient
import logging
from beanie import Document, init_beanie
import app.schemas
from app.core.config import settings


class DBMongo:
    client: AsyncMongoClient = None


db = DBMongo()


async def connect_to_mongo():
    logger = logging.getLogger(__name__)
    if not settings.MONGODB_URL:
        logger.error("MONGODB_URL environment variable not set")
        return False

    try:
        db.client = AsyncMongoClient(settings.MONGODB_URL)

        document_models = [
            model for model in app.schemas.__dict__.values()
            if isinstance(model, type) and issubclass(model, Document)
        ]

        await init_beanie(database=db.client[settings.MONGODB_DATABASE], document_models=document_models)
        await db.client.admin.command("ping")

    except Exception as e:
        logger.exception("Failed to connect to MongoDB: %s", e)
        db.client = None
        return False

    logger.info("Successfully connected to MongoDB")
    return True


async def close_mongo_connection():
    if db.client is not None:
        await db.client.close()
        db.client = None
