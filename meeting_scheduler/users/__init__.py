"""
User preferences, profiles and request authentication
"""
from .auth import Authenticator, bearer_token
from .preferences import (
    FirestorePreferenceBackend,
    MemoryPreferenceBackend,
    PreferenceRepository,
    UserProfile,
    get_preference_repository,
)

__all__ = [
    'Authenticator', 'bearer_token', 'UserProfile', 'PreferenceRepository',
    'MemoryPreferenceBackend', 'FirestorePreferenceBackend', 'get_preference_repository',
]
