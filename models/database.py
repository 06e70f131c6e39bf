"""Database connection setup and the users collection adapter."""

from datetime import date, datetime, time, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from config.settings import settings
from schemas.exercise import ExerciseRecord, User
from utils.errors import Conflict, StorageUnavailable
from utils.logger import setup_logger

logger = setup_logger(__name__)


class Database:
    """Database connection manager."""
    
    client: Optional[AsyncIOMotorClient] = None


db = Database()


async def connect_to_mongo():
    """Create database connection."""
    db.client = AsyncIOMotorClient(settings.mongodb_url)
    logger.info(f"Connected to MongoDB database: {settings.database_name}")


async def close_mongo_connection():
    """Close database connection."""
    if db.client:
        db.client.close()
        db.client = None
        logger.info("Disconnected from MongoDB")


async def init_mongo() -> "UserStore":
    """Connect to MongoDB and prepare the users collection.

    The unique index on ``username`` is what turns a concurrent duplicate
    registration into a ``DuplicateKeyError`` instead of a second user.
    """
    await connect_to_mongo()
    
    users_collection = get_users_collection()
    await users_collection.create_index([("username", ASCENDING)], unique=True)
    
    logger.info("MongoDB initialized: users collection ready")
    return UserStore(users_collection)


def get_database():
    """Get database instance."""
    return db.client[settings.database_name]


def get_users_collection() -> AsyncIOMotorCollection:
    """Get users collection."""
    return get_database()[settings.users_collection]


# ---------------------------
# Document conversion
# ---------------------------

def record_to_document(record: ExerciseRecord) -> Dict[str, Any]:
    """BSON has no date-only type, so dates are stored as UTC midnight."""
    return {
        "description": record.description,
        "duration": record.duration,
        "date": datetime.combine(record.date, time.min, tzinfo=timezone.utc),
    }


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def document_to_user(document: Dict[str, Any]) -> User:
    """Build a User from a users collection document."""
    log = [
        ExerciseRecord(
            description=entry["description"],
            duration=entry["duration"],
            date=_as_date(entry["date"]),
        )
        for entry in document.get("log", [])
    ]
    return User(id=str(document["_id"]), username=document["username"], log=log)


def _object_id(user_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


# ---------------------------
# Users collection adapter
# ---------------------------

class UserStore:
    """Create, look up and extend users stored in one MongoDB collection.

    Driver failures surface as ``StorageUnavailable``; the driver exception
    is logged here and never reaches the client.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_by_username(self, username: str) -> Optional[User]:
        try:
            document = await self.collection.find_one({"username": username})
        except PyMongoError as e:
            logger.error(f"Error finding user by username {username!r}: {e}", exc_info=True)
            raise StorageUnavailable() from e
        return document_to_user(document) if document else None

    async def find_by_id(self, user_id: str) -> Optional[User]:
        object_id = _object_id(user_id)
        if object_id is None:
            return None
        try:
            document = await self.collection.find_one({"_id": object_id})
        except PyMongoError as e:
            logger.error(f"Error finding user {user_id}: {e}", exc_info=True)
            raise StorageUnavailable() from e
        return document_to_user(document) if document else None

    async def create(self, username: str) -> User:
        """Insert a new user with an empty log.

        Raises Conflict if the username is already taken.
        """
        document = {"username": username, "count": 0, "log": []}
        try:
            result = await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate registration for username {username!r}")
            raise Conflict() from e
        except PyMongoError as e:
            logger.error(f"Error creating user {username!r}: {e}", exc_info=True)
            raise StorageUnavailable() from e
        logger.info(f"Created user {username!r} with id {result.inserted_id}")
        return User(id=str(result.inserted_id), username=username, log=[])

    async def append_log(self, user_id: str, record: ExerciseRecord) -> Optional[User]:
        """Push one record onto the user's log and return the updated user.

        Returns None if no user has this id.
        """
        object_id = _object_id(user_id)
        if object_id is None:
            return None
        try:
            document = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$push": {"log": record_to_document(record)}, "$inc": {"count": 1}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Error appending to log of user {user_id}: {e}", exc_info=True)
            raise StorageUnavailable() from e
        return document_to_user(document) if document else None
