"""
hangout.services.user_service — User Records
=============================================

Upserts the user row for an authenticated identity.  The identity
provider owns the subject; Hangout only mirrors display fields.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from hangout.database.engine import get_session
from hangout.database.models import User
from hangout.errors import ValidationError
from hangout.services.permissions import get_current_user

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def create_or_update_user(
    engine: Engine,
    subject: str,
    name: str,
    username: str,
    avatar_url: str | None = None,
) -> User:
    """Insert or refresh the user row keyed by *subject*."""
    if not subject:
        raise ValidationError("Subject is required")
    if not name.strip() or not username.strip():
        raise ValidationError("Name and username are required")

    with get_session(engine) as session:
        user = session.scalar(select(User).where(User.subject == subject))
        if user is None:
            user = User(subject=subject, name=name.strip(), username=username.strip(),
                        avatar_url=avatar_url)
            session.add(user)
            session.flush()
            logger.info("Registered user %d (%s)", user.id, user.username)
        else:
            user.name = name.strip()
            user.username = username.strip()
            user.avatar_url = avatar_url
        return user


def get_me(engine: Engine, subject: str | None) -> User:
    with get_session(engine) as session:
        return get_current_user(session, subject)
