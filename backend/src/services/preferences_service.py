"""
User preferences service.

A user without a stored preferences row gets the defaults; the row is only
created on the first write.
"""

import copy
import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from core.constants import DEFAULT_NOTIFICATION_SETTINGS
from models import UserPreferences

logger = logging.getLogger(__name__)

PREFERENCE_FIELDS = (
    "default_anesthesia_type",
    "default_institution",
    "export_settings",
    "dashboard_settings",
    "notification_settings",
)


def default_preferences(user_id: str) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "default_anesthesia_type": "",
        "default_institution": "",
        "notification_settings": copy.deepcopy(DEFAULT_NOTIFICATION_SETTINGS),
    }


class PreferencesService:

    @staticmethod
    def get_preferences(db: Session, user_id: str) -> Any:
        """Return the stored UserPreferences, or a defaults dict when none exist."""
        preferences = db.query(UserPreferences).filter(UserPreferences.user_id == user_id).first()
        if preferences is None:
            return default_preferences(user_id)
        return preferences

    @staticmethod
    def upsert_preferences(db: Session, user_id: str, data: Dict[str, Any]) -> UserPreferences:
        """
        Create or update the user's preferences row.

        Only supplied fields are written; a first write starts from the
        defaults.
        """
        preferences = db.query(UserPreferences).filter(UserPreferences.user_id == user_id).first()
        if preferences is None:
            defaults = default_preferences(user_id)
            preferences = UserPreferences(
                user_id=user_id,
                default_anesthesia_type=defaults["default_anesthesia_type"],
                default_institution=defaults["default_institution"],
                notification_settings=defaults["notification_settings"],
            )
            db.add(preferences)
            logger.info(f"Creating preferences for user {user_id}")

        for field, value in data.items():
            if field in PREFERENCE_FIELDS:
                setattr(preferences, field, value)
        db.commit()
        db.refresh(preferences)
        return preferences
