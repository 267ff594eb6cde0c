"""
User preference storage backed by Firestore, or memory in mock mode
"""
import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from firebase_admin import firestore

from config.settings import Config
from meeting_scheduler.exceptions import AuthenticationError
from meeting_scheduler.users.firebase_app import get_firebase_app

logger = logging.getLogger(__name__)


class UserProfile:
    """Authenticated user as seen by the API"""

    def __init__(self, uid: str, email: str = None, display_name: str = None, photo_url: str = None):
        self.uid = uid
        self.email = email
        self.display_name = display_name
        self.photo_url = photo_url

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        return cls(
            uid=data["uid"],
            email=data.get("email"),
            display_name=data.get("displayName"),
            photo_url=data.get("photoURL"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "photoURL": self.photo_url,
        }


class MemoryPreferenceBackend:
    """In-process document store used in mock mode and tests"""

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get_document(self, uid: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._documents.get(uid)
            return copy.deepcopy(document) if document is not None else None

    def create_document(self, uid: str, profile: UserProfile, preferences: Dict[str, Any]):
        now = datetime.now(timezone.utc)
        with self._lock:
            self._documents[uid] = {
                "email": profile.email,
                "displayName": profile.display_name,
                "photoURL": profile.photo_url,
                "preferences": copy.deepcopy(preferences),
                "createdAt": now,
                "updatedAt": now,
            }

    def update_preferences(self, uid: str, preferences: Dict[str, Any]):
        with self._lock:
            document = self._documents[uid]
            document["preferences"] = copy.deepcopy(preferences)
            document["updatedAt"] = datetime.now(timezone.utc)


class FirestorePreferenceBackend:
    """One document per user id in the users collection"""

    def __init__(self, config: Config = None, client=None):
        self.config = config or Config()
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = firestore.client(get_firebase_app(self.config))
        return self._client

    def _document(self, uid: str):
        return self.client.collection(self.config.PREFERENCES_COLLECTION).document(uid)

    def get_document(self, uid: str) -> Optional[Dict[str, Any]]:
        snapshot = self._document(uid).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def create_document(self, uid: str, profile: UserProfile, preferences: Dict[str, Any]):
        self._document(uid).set({
            "email": profile.email,
            "displayName": profile.display_name,
            "photoURL": profile.photo_url,
            "preferences": preferences,
            "createdAt": firestore.SERVER_TIMESTAMP,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        })

    def update_preferences(self, uid: str, preferences: Dict[str, Any]):
        self._document(uid).update({
            "preferences": preferences,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        })


class PreferenceRepository:
    """Reads and writes user preferences, creating documents lazily"""

    def __init__(self, backend=None, config: Config = None):
        self.config = config or Config()
        self.backend = backend or MemoryPreferenceBackend()

    def default_preferences(self) -> Dict[str, Any]:
        return copy.deepcopy(self.config.DEFAULT_PREFERENCES)

    def get_user_preferences(self, user: Optional[UserProfile]) -> Dict[str, Any]:
        """Stored preferences; defaults on any failure so callers never block"""
        try:
            if user is None:
                raise AuthenticationError("User not authenticated")

            document = self.backend.get_document(user.uid)
            if document is not None:
                return document.get("preferences") or {}

            preferences = self.default_preferences()
            self.backend.create_document(user.uid, user, preferences)
            logger.info(f"Created default preferences for {user.uid}")
            return preferences
        except Exception as e:
            logger.error(f"Error getting user preferences: {e}")
            return self.default_preferences()

    def update_user_preferences(self, user: Optional[UserProfile], preferences: Dict[str, Any]) -> bool:
        if user is None:
            raise AuthenticationError("User not authenticated")

        try:
            if self.backend.get_document(user.uid) is not None:
                self.backend.update_preferences(user.uid, preferences)
            else:
                self.backend.create_document(user.uid, user, preferences)
        except Exception as e:
            logger.error(f"Error updating user preferences: {e}")
            raise
        logger.info(f"Updated preferences for {user.uid}")
        return True

    def get_user_profile(self, user: Optional[UserProfile]) -> Dict[str, Any]:
        if user is None:
            raise AuthenticationError("User not authenticated")
        return user.to_dict()


def get_preference_repository(config: Config = None) -> PreferenceRepository:
    """Memory-backed repository in mock mode, Firestore otherwise"""
    config = config or Config()
    if config.USE_MOCK_DATA:
        return PreferenceRepository(MemoryPreferenceBackend(), config)
    return PreferenceRepository(FirestorePreferenceBackend(config), config)
