"""
Shared firebase_admin application
"""
import logging

import firebase_admin
from firebase_admin import credentials

from config.settings import Config

logger = logging.getLogger(__name__)


def get_firebase_app(config: Config = None) -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    config = config or Config()
    if config.FIREBASE_CREDENTIALS_PATH:
        cred = credentials.Certificate(config.FIREBASE_CREDENTIALS_PATH)
        logger.info(f"🔥 Initializing Firebase with {config.FIREBASE_CREDENTIALS_PATH}")
    else:
        cred = credentials.ApplicationDefault()
        logger.info("🔥 Initializing Firebase with application default credentials")
    return firebase_admin.initialize_app(cred)
