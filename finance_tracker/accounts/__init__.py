"""Local accounts and session package."""

from finance_tracker.accounts.service import (
    AccountService,
    hash_password,
    validate_password,
    validate_username,
)

__all__ = [
    "AccountService",
    "hash_password",
    "validate_password",
    "validate_username",
]
