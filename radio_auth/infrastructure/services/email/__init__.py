from .password_email_service import PasswordEmailService, mask_email

__all__ = ["PasswordEmailService", "mask_email"]
