"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_float(value):
    return float(value) if value else None


class Config:
    """Application configuration."""
    
    # Open Library
    OPENLIBRARY_BASE_URL = os.getenv("OPENLIBRARY_BASE_URL", "https://openlibrary.org")
    READING_LIST_USER = os.getenv("READING_LIST_USER", "mekBot")
    READING_LIST_SHELF = os.getenv("READING_LIST_SHELF", "want-to-read")
    READING_LIST_LIMIT = int(os.getenv("READING_LIST_LIMIT", "100"))
    
    @property
    def READING_LIST_URL(self):
        """Build the reading-list endpoint URL."""
        return f"{self.OPENLIBRARY_BASE_URL}/people/{self.READING_LIST_USER}/books/{self.READING_LIST_SHELF}.json"
    
    # Admin login
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@gmail.com")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin@123")
    
    # Defaults
    # No timeout unless one is configured
    DEFAULT_TIMEOUT = _optional_float(os.getenv("DEFAULT_TIMEOUT"))
    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
