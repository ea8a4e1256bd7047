"""API configuration for the XENOPETS game client"""
import os


class APIConfig:
    """API configuration settings"""

    # Base URL of the backend project (from environment or default)
    BASE_URL: str = os.getenv("XENOPETS_API_URL", "http://localhost:54321")

    # Anonymous API key sent with every request
    API_KEY: str = os.getenv("XENOPETS_API_KEY", "")

    # Feature flag - enable/disable API functionality
    ENABLED: bool = os.getenv("XENOPETS_API_ENABLED", "true").lower() == "true"

    # Timeout for a single request attempt (seconds)
    TIMEOUT: float = float(os.getenv("XENOPETS_API_TIMEOUT", "10.0"))

    # Retries after the first attempt (2 retries = 3 attempts)
    RETRY_COUNT: int = int(os.getenv("XENOPETS_API_RETRY_COUNT", "2"))

    # Retry delay (seconds) - exponential backoff starting from this
    RETRY_DELAY: float = float(os.getenv("XENOPETS_API_RETRY_DELAY", "1.0"))

    @classmethod
    def get_base_url(cls) -> str:
        """Get base API URL"""
        return cls.BASE_URL.rstrip("/")

    @classmethod
    def get_api_key(cls) -> str:
        """Get the anonymous API key"""
        return cls.API_KEY

    @classmethod
    def is_enabled(cls) -> bool:
        """Check if API is enabled"""
        return cls.ENABLED

    @classmethod
    def get_timeout(cls) -> float:
        """Get per-attempt request timeout"""
        return cls.TIMEOUT

    @classmethod
    def get_retry_count(cls) -> int:
        """Get max retry count"""
        return cls.RETRY_COUNT

    @classmethod
    def get_retry_delay(cls) -> float:
        """Get initial retry delay"""
        return cls.RETRY_DELAY
