"""
Auth Service - Core authentication logic.

Handles user registration and credential checks, keeping DB logic out of
the routes.
"""
from flask import current_app

from lexistack_app.models import db, User
from lexistack_app.modules.shared.utils.db_session import safe_commit


class AuthService:
    """Service for authentication related operations."""

    @staticmethod
    def register_user(username, email, password):
        """
        Create a user account.

        Returns:
            The new User.
        """
        user = User(username=username, email=email or None)
        user.set_password(password)
        db.session.add(user)
        safe_commit(db.session)
        current_app.logger.info(f"User registered: {username} ({user.user_id})")
        return user

    @staticmethod
    def authenticate_user(username_or_email, password):
        """
        Verify credentials.

        Returns:
            User object if valid, None otherwise.
        """
        user = User.query.filter(
            (User.username == username_or_email) | (User.email == username_or_email)
        ).first()
        if user and user.check_password(password):
            return user
        return None
