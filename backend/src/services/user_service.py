"""
User service for account, profile and admin user-management logic.

Users are upserted from identity-provider claims on every authenticated
request, so the users table stays in sync with the provider lazily.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from core.constants import THEMES, USER_ROLES
from models import Case, User
from utils.datetime_utils import local_now

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("specialty", "license_number", "institution", "profile_image_url")
ADMIN_EDITABLE_FIELDS = (
    "email",
    "first_name",
    "last_name",
    "profile_image_url",
    "role",
    "specialty",
    "license_number",
    "institution",
    "is_active",
    "theme_preference",
)


class UserService:
    """
    Service class for user operations.

    Contains business logic for the authenticated user's own profile and for
    the admin user-management pages.
    """

    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    @staticmethod
    def upsert_user_from_claims(
        db: Session,
        sub: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> User:
        """
        Create or update the user identified by ``sub``.

        Existing users only have their identity fields synced when the claims
        carry a different value; profile fields edited by the user are left
        alone.

        Args:
            db: Database session
            sub: Identity provider subject
            email: Email claim
            first_name: Given name claim
            last_name: Family name claim
            profile_image_url: Picture claim (only used when the user has none)

        Returns:
            The persisted User
        """
        user = UserService.get_user(db, sub)
        if user is None:
            user = User(
                id=sub,
                email=email,
                first_name=first_name,
                last_name=last_name,
                profile_image_url=profile_image_url,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Created user {sub} from identity claims")
            return user

        changed = False
        for field, value in (("email", email), ("first_name", first_name), ("last_name", last_name)):
            if value is not None and getattr(user, field) != value:
                setattr(user, field, value)
                changed = True
        if profile_image_url and not user.profile_image_url:
            user.profile_image_url = profile_image_url
            changed = True

        if changed:
            db.commit()
            db.refresh(user)
            logger.debug(f"Synced identity claims for user {sub}")
        return user

    @staticmethod
    def update_profile(db: Session, user_id: str, updates: Dict[str, Any]) -> User:
        """
        Update the self-editable profile fields of a user.

        Raises:
            HTTPException: 400 if no editable field is supplied, 404 if the user is missing
        """
        filtered = {k: v for k, v in updates.items() if k in PROFILE_FIELDS}
        if not filtered:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No valid fields to update"
            )

        user = UserService.get_user(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        for field, value in filtered.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
        logger.info(f"Updated profile fields {sorted(filtered)} for user {user_id}")
        return user

    @staticmethod
    def update_theme(db: Session, user_id: str, theme: Any) -> User:
        """
        Set the theme preference. Only 'light' and 'dark' are accepted.

        The stored value is left untouched when the theme is invalid.
        """
        if theme not in THEMES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid theme")

        user = UserService.get_user(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        user.theme_preference = theme
        db.commit()
        return user

    @staticmethod
    def get_all_users(db: Session) -> List[Tuple[User, int]]:
        """
        List every user, newest first, with their case counts.

        Returns:
            List of (User, cases_count) tuples
        """
        case_counts = (
            db.query(Case.anesthesiologist_id, func.count(Case.id).label("cnt"))
            .group_by(Case.anesthesiologist_id)
            .subquery()
        )
        rows = (
            db.query(User, func.coalesce(case_counts.c.cnt, 0))
            .outerjoin(case_counts, case_counts.c.anesthesiologist_id == User.id)
            .order_by(User.created_at.desc())
            .all()
        )
        return [(user, int(count)) for user, count in rows]

    @staticmethod
    def count_cases(db: Session, user_id: str) -> int:
        return db.query(func.count(Case.id)).filter(Case.anesthesiologist_id == user_id).scalar() or 0

    @staticmethod
    def admin_update_user(db: Session, user_id: str, updates: Dict[str, Any]) -> User:
        """
        Apply an admin edit to any user.

        Raises:
            HTTPException: 404 if the user does not exist
            ValueError: If the role or theme value is not recognized
        """
        user = UserService.get_user(db, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        filtered = {k: v for k, v in updates.items() if k in ADMIN_EDITABLE_FIELDS}
        if "role" in filtered and filtered["role"] not in USER_ROLES:
            raise ValueError(f"Invalid role: {filtered['role']}")
        if "theme_preference" in filtered and filtered["theme_preference"] not in THEMES:
            raise ValueError(f"Invalid theme: {filtered['theme_preference']}")

        for field, value in filtered.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
        logger.info(f"Admin updated user {user_id}: {sorted(filtered)}")
        return user

    @staticmethod
    def promote_to_admin(db: Session, email: str) -> Optional[User]:
        """Grant the admin role to the user with ``email`` and reactivate them."""
        user = UserService.get_user_by_email(db, email)
        if not user:
            logger.warning(f"Setup: no user found with email {email}")
            return None
        user.role = "admin"
        user.is_active = True
        db.commit()
        db.refresh(user)
        logger.info(f"Set {email} as admin")
        return user

    @staticmethod
    def get_user_stats(db: Session) -> Dict[str, Any]:
        """
        Aggregate user counts for the admin dashboard.

        Returns:
            Dict with totals, role breakdown, recent registrations, and
            specialty/institution distributions ("Not Specified" for blanks).
        """
        total = db.query(func.count(User.id)).scalar() or 0
        active = db.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar() or 0
        admins = db.query(func.count(User.id)).filter(User.role == "admin").scalar() or 0
        week_ago = local_now() - timedelta(days=7)
        recent = db.query(func.count(User.id)).filter(User.created_at >= week_ago).scalar() or 0

        by_role = (
            db.query(User.role, func.count(User.id))
            .group_by(User.role)
            .order_by(func.count(User.id).desc())
            .all()
        )

        def _distribution(column) -> List[Dict[str, Any]]:
            counts: Dict[str, int] = {}
            for (value,) in db.query(column).all():
                label = value.strip() if value and value.strip() else "Not Specified"
                counts[label] = counts.get(label, 0) + 1
            return [
                {"label": label, "count": count}
                for label, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
            ]

        return {
            "total_users": total,
            "active_users": active,
            "inactive_users": total - active,
            "admin_users": admins,
            "recent_registrations": recent,
            "users_by_role": [{"role": role, "count": count} for role, count in by_role],
            "users_by_specialty": _distribution(User.specialty),
            "users_by_institution": _distribution(User.institution),
        }
