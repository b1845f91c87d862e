"""
Password utilities for the admin console
"""

import bcrypt


class PasswordHelper:
    """Password hashing and verification using bcrypt"""

    DEFAULT_ROUNDS = 12

    @staticmethod
    def hash_password(password: str, rounds: int = None) -> str:
        """
        Hash password using bcrypt

        Args:
            password: Plain text password
            rounds: BCrypt rounds (default: 12)

        Returns:
            Hashed password string
        """
        salt = bcrypt.gensalt(rounds=rounds or PasswordHelper.DEFAULT_ROUNDS)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    @staticmethod
    def verify_password(password: str, hashed_password: str) -> bool:
        """
        Verify password against hash

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        if not password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))
        except ValueError:
            return False
