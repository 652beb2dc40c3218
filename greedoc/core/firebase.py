"""
Firebase admin initialization and helpers.

This module initializes the Firebase Admin SDK for use in the API.
Firestore is the only datastore: every service reads and writes through
the client returned by ``get_db``. FCM pushes go through the same app.
"""

import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore

from greedoc.core.config import settings

logger = logging.getLogger(__name__)

# Global references to avoid re-initialization
_firebase_app = None
db = None


def init_firebase():
    """
    Initialize Firebase Admin SDK if not already initialized.

    The service account path comes from the FIREBASE_CREDENTIALS setting
    (environment or .env), defaulting to greedoc/core/firebase_key.json.
    """

    global _firebase_app, db

    # Prevent re-initialization (important for Uvicorn reload)
    if firebase_admin._apps:
        if db is None:
            db = firestore.client()
        return

    cred_path = settings.FIREBASE_CREDENTIALS

    if not os.path.exists(cred_path):
        raise RuntimeError(
            f"Firebase credentials not found at: {cred_path}\n"
            "Set FIREBASE_CREDENTIALS env var or place firebase_key.json correctly."
        )

    cred = credentials.Certificate(cred_path)
    _firebase_app = firebase_admin.initialize_app(cred)

    db = firestore.client()

    logger.info("Firebase Admin initialized successfully.")


def get_db():
    """Return the Firestore client, initializing the Admin SDK on first use."""
    if db is None:
        init_firebase()
    return db
