"""Authentication service - business logic for user auth."""
from bson import ObjectId
from bson.errors import InvalidId

from worktracker.database import USERS_COLLECTION
from worktracker.exceptions import NotFoundError, ValidationError
from worktracker.models.user import User
from worktracker.services.profile_service import ProfileService
from worktracker.utils.auth import create_access_token, hash_password, verify_password
from worktracker.utils.clock import Clock, system_clock


class AuthService:
    """Service for handling user authentication."""

    def __init__(self, db, clock: Clock = system_clock):
        """Initialize service with database connection."""
        self.db = db
        self.clock = clock
        self.users = db[USERS_COLLECTION]

    def _doc_to_user(self, doc: dict) -> User:
        return User(
            _id=str(doc["_id"]),
            email=doc["email"],
            name=doc["name"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def register_user(self, email: str, password: str, name: str) -> User:
        """
        Register a new user and give them a default profile.

        Raises:
            ValidationError: If email is already registered
        """
        if await self.users.find_one({"email": email}):
            raise ValidationError("Email already registered")

        now = self.clock.now()
        user_doc = {
            "email": email,
            "hashed_password": hash_password(password),
            "name": name,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id

        await ProfileService(self.db, self.clock).ensure_profile(str(result.inserted_id))
        return self._doc_to_user(user_doc)

    async def login(self, email: str, password: str) -> str:
        """
        Login user and return JWT token.

        Raises:
            ValidationError: If credentials are invalid
        """
        user_doc = await self.users.find_one({"email": email})
        if not user_doc or not verify_password(password, user_doc["hashed_password"]):
            raise ValidationError("Invalid email or password")

        return create_access_token(user_id=str(user_doc["_id"]))

    async def get_user_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If user not found
        """
        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            raise NotFoundError("Invalid user ID format")

        user_doc = await self.users.find_one({"_id": object_id})
        if not user_doc:
            raise NotFoundError("User not found")

        return self._doc_to_user(user_doc)
