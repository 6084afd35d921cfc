from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class PasswordValidationResult:
    """Outcome of checking a password against the policy.

    Attributes:
        is_valid: True when no rule was violated.
        errors: One message per violated rule, in rule order.
    """

    is_valid: bool
    errors: List[str] = field(default_factory=list)
