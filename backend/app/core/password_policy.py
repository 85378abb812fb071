from __future__ import annotations

from typing import List

from app.core.config import settings
from app.core.errors import ValidationError

# bcrypt only looks at the first 72 bytes of a secret.
PASSWORD_MAX_BYTES = 72


def evaluate_password(password: str) -> List[str]:
    """
    Returns a list of violation codes if the password does not meet policy.
    """
    pw = password or ""
    violations: list[str] = []
    min_length = max(int(getattr(settings, "PASSWORD_MIN_LENGTH", 6) or 0), 1)

    if len(pw) < min_length:
        violations.append("min_length")
    if len(pw.encode("utf-8")) > PASSWORD_MAX_BYTES:
        violations.append("max_length")
    return violations


def ensure_valid_password(password: str) -> None:
    violations = evaluate_password(password)
    if violations:
        min_length = int(getattr(settings, "PASSWORD_MIN_LENGTH", 6) or 1)
        raise ValidationError(
            f"Password must be between {min_length} and {PASSWORD_MAX_BYTES} characters",
            details={"code": "INVALID_PASSWORD", "violations": violations},
        )
