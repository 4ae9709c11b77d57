"""Profile service - hourly rate and tracker preferences."""
from worktracker.config import settings
from worktracker.database import PROFILES_COLLECTION
from worktracker.models.user import Currency, ProfileUpdate, UserProfile, UserSettings
from worktracker.utils.clock import Clock, system_clock


def normalize_settings(raw) -> UserSettings:
    """
    Coerce stored settings into a valid ``UserSettings``.

    Unknown currencies fall back to the configured default and idle minutes
    are floored and clamped to at least one.
    """
    raw = raw if isinstance(raw, dict) else {}

    currency = raw.get("currency")
    if currency not in {item.value for item in Currency}:
        currency = settings.default_currency

    idle_minutes = raw.get("idle_minutes")
    if not isinstance(idle_minutes, (int, float)) or isinstance(idle_minutes, bool):
        idle_minutes = settings.default_idle_minutes

    dark_mode = raw.get("dark_mode")
    return UserSettings(
        currency=currency,
        dark_mode=dark_mode if isinstance(dark_mode, bool) else False,
        idle_minutes=max(1, int(idle_minutes)),
    )


class ProfileService:
    """Service for reading and saving user profiles."""

    def __init__(self, db, clock: Clock = system_clock):
        """Initialize service with database connection."""
        self.db = db
        self.clock = clock
        self.profiles = db[PROFILES_COLLECTION]

    def _doc_to_profile(self, user_id: str, doc: dict | None) -> UserProfile:
        doc = doc or {}
        hourly_rate = doc.get("hourly_rate", settings.default_hourly_rate)
        if not isinstance(hourly_rate, (int, float)) or isinstance(hourly_rate, bool):
            hourly_rate = settings.default_hourly_rate

        return UserProfile(
            user_id=user_id,
            hourly_rate=max(0.0, float(hourly_rate)),
            settings=normalize_settings(doc.get("settings")),
            updated_at=doc.get("updated_at"),
        )

    async def get_profile(self, user_id: str) -> UserProfile:
        """Get a user's profile; a missing document yields the defaults."""
        doc = await self.profiles.find_one({"user_id": user_id})
        return self._doc_to_profile(user_id, doc)

    async def ensure_profile(self, user_id: str) -> UserProfile:
        """Create the default profile document if the user has none."""
        existing = await self.profiles.find_one({"user_id": user_id})
        if existing:
            return self._doc_to_profile(user_id, existing)

        profile = self._doc_to_profile(user_id, None)
        profile.updated_at = self.clock.now()
        await self.profiles.insert_one({
            "user_id": user_id,
            "hourly_rate": profile.hourly_rate,
            "settings": profile.settings.model_dump(mode="json"),
            "updated_at": profile.updated_at,
        })
        return profile

    async def save_profile(self, user_id: str, profile_update: ProfileUpdate) -> UserProfile:
        """Save hourly rate and settings (upsert)."""
        now = self.clock.now()
        update_doc = {
            "hourly_rate": max(0.0, profile_update.hourly_rate),
            "settings": normalize_settings(
                profile_update.settings.model_dump(mode="json")
            ).model_dump(mode="json"),
            "updated_at": now,
        }

        await self.profiles.update_one(
            {"user_id": user_id},
            {"$set": update_doc},
            upsert=True,
        )
        return self._doc_to_profile(user_id, update_doc)
