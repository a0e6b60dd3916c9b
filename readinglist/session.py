"""Login gate for the dashboard."""
import logging

logger = logging.getLogger(__name__)

LOGIN_ERROR = "Email or password is wrong! Try again"


def check_credentials(email: str, password: str, config) -> bool:
    """Return True when the pair matches the configured admin login."""
    ok = email == config.ADMIN_EMAIL and password == config.ADMIN_PASSWORD
    if not ok:
        logger.warning(f"Rejected login for {email!r}")
    return ok
