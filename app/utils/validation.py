import re

from .constants import AppConstants

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


class ValidationHelpers:
    @staticmethod
    def validate_phone(phone: str) -> bool:
        """Validate phone number in E.164 format, e.g. +15550101234"""
        if not phone:
            return True  # Optional field

        return E164_PATTERN.match(phone) is not None

    @staticmethod
    def validate_username(username: str) -> bool:
        return (username or "").isascii() and (username or "").isalnum()

    @staticmethod
    def password_problems(password: str) -> list:
        """Unmet password rules; an empty list means the password is acceptable"""
        problems = []
        if len(password) < AppConstants.MIN_PASSWORD_LENGTH:
            problems.append(f"be at least {AppConstants.MIN_PASSWORD_LENGTH} characters")
        if not re.search(r"[A-Z]", password):
            problems.append("contain an uppercase letter")
        if not re.search(r"[a-z]", password):
            problems.append("contain a lowercase letter")
        if not re.search(r"[0-9]", password):
            problems.append("contain a number")
        return problems
