"""
Firebase Firestore initialization.
Single-source-of-truth Firestore client for CivicWatch.
"""

import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore, initialize_app

from civicwatch.core.settings import Settings, settings

logger = logging.getLogger(__name__)

db: Optional[firestore.Client] = None

REQUIRED_CREDENTIAL_FIELDS = ["type", "project_id", "private_key", "client_email"]


def _validate_credentials_file(cred_path: str) -> None:
    """Fail early with an actionable message on a broken service account file."""
    if not os.path.exists(cred_path):
        raise RuntimeError(
            f"Firebase credentials file not found: {cred_path}\n"
            f"Check FIREBASE_CREDENTIALS_PATH in your .env file."
        )

    try:
        with open(cred_path, "r", encoding="utf-8") as f:
            cred_data = json.load(f)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Firebase credentials file is not valid JSON: {e}") from e

    missing_fields = [field for field in REQUIRED_CREDENTIAL_FIELDS if field not in cred_data]
    if missing_fields:
        raise RuntimeError(
            f"Firebase credentials file is missing required fields: {missing_fields}\n"
            f"Please download a fresh service account key from Firebase Console."
        )

    logger.info(f"[FIRESTORE] Credentials file validated (project: {cred_data.get('project_id', 'N/A')})")


def initialize_firestore(app_settings: Settings = settings) -> firestore.Client:
    global db

    if db is not None:
        return db

    if not firebase_admin._apps:
        if app_settings.FIREBASE_CREDENTIALS_PATH:
            _validate_credentials_file(app_settings.FIREBASE_CREDENTIALS_PATH)
            initialize_app(credentials.Certificate(app_settings.FIREBASE_CREDENTIALS_PATH))
            logger.info("[FIRESTORE] Firebase Admin SDK initialized with service account")
        else:
            logger.info("[FIRESTORE] No credentials path set, using Application Default Credentials")
            options = {"projectId": app_settings.FIREBASE_PROJECT_ID} if app_settings.FIREBASE_PROJECT_ID else None
            initialize_app(options=options)

    db = firestore.client()
    logger.info(f"[FIRESTORE] Using Firestore project: {app_settings.FIREBASE_PROJECT_ID or 'default'}")
    return db


def get_db(app_settings: Settings = settings) -> firestore.Client:
    """
    Get the initialized Firestore client.

    Raises RuntimeError if Firestore cannot be initialized.
    """
    if db is None:
        try:
            initialize_firestore(app_settings)
        except Exception as e:
            raise RuntimeError(
                f"Firestore not initialized and initialization failed: {e}. "
                "Please check your Firebase credentials and configuration."
            ) from e
    return db
