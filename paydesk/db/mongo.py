from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from paydesk.core.config import settings
from paydesk.core.logging import get_logger

logger = get_logger(__name__)

class MongoDatabase:
    """MongoDB connection manager."""
    
    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL, tz_aware=True)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]
    
    await create_indexes(mongodb.db)
    logger.info("mongo_connected", database=settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("mongo_disconnected")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    # One payroll row per user/period/month/year, even under racing writers
    await db["payments"].create_index(
        [("user_id", ASCENDING), ("period", ASCENDING), ("month", ASCENDING), ("year", ASCENDING)],
        unique=True,
        name="payment_period_unique"
    )
    await db["payments"].create_index([("month", ASCENDING), ("year", ASCENDING)])
    
    # Shared links: token lookup, and one link per pay period
    await db["shared_links"].create_index("token", unique=True)
    await db["shared_links"].create_index(
        [("month", ASCENDING), ("year", ASCENDING), ("period", ASCENDING)],
        unique=True,
        name="shared_link_period_unique"
    )
    
    # Time logs are owned by the timesheet service; payroll reads by status and date
    await db["time_logs"].create_index([("status", ASCENDING), ("date", DESCENDING)])
