import re
from typing import List, Optional

from radio_auth.domain.value_objects import PasswordValidationResult

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


class PasswordPolicyValidator:
    """Validates passwords against the admin password policy.

    The policy requires at least ``min_length`` characters and a mix of
    uppercase letters, lowercase letters, digits and special characters. A
    password may not equal the account's email address, ignoring case.

    Every rule is checked independently so the caller can show all problems
    at once. Violations are returned, never raised.
    """

    def __init__(self, min_length: int = 8):
        self.min_length = min_length

    def validate(self, password: str, email: Optional[str] = None) -> PasswordValidationResult:
        """Validates the given password against the policy.

        Args:
            password (str): The password to validate.
            email (Optional[str]): The account's email, which the password must not match.

        Returns:
            PasswordValidationResult: ``is_valid`` plus one message per violated rule.
        """
        errors: List[str] = []
        password = password or ""

        if len(password) < self.min_length:
            errors.append(f"Password must be at least {self.min_length} characters long")

        if not re.search(r"[A-Z]", password):
            errors.append("Password must contain at least one uppercase letter")

        if not re.search(r"[a-z]", password):
            errors.append("Password must contain at least one lowercase letter")

        if not re.search(r"\d", password):
            errors.append("Password must contain at least one digit")

        if not any(char in SPECIAL_CHARACTERS for char in password):
            errors.append(
                f"Password must contain at least one special character ({SPECIAL_CHARACTERS})"
            )

        if email and password.lower() == email.strip().lower():
            errors.append("Password must not match your email address")

        return PasswordValidationResult(is_valid=not errors, errors=errors)
