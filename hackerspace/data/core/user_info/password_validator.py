"""
Password rules shared by account creation and password changes
"""


class PasswordValidator:

    MIN_LENGTH = 8
    MAX_LENGTH = 128

    @classmethod
    def validate(cls, password, confirm_password=None):
        """
        Check a new password against the length rules and its confirmation.

        Args:
            password (str): The new password
            confirm_password (str, optional): Confirmation field; skipped when None

        Returns:
            tuple: (is_valid, error_message); error_message is '' when valid
        """
        if not password:
            return False, "Password is required"

        if confirm_password is not None and password != confirm_password:
            return False, "New password and confirmation do not match"

        if len(password) < cls.MIN_LENGTH:
            return False, f"Password must be at least {cls.MIN_LENGTH} characters"

        if len(password) > cls.MAX_LENGTH:
            return False, f"Password must be less than {cls.MAX_LENGTH} characters"

        return True, ""
