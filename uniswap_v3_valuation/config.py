"""
Configuration settings for the valuation engine

Loads environment variables and provides curve / solver / cache defaults.
"""
import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Engine settings"""

    # Curve generation
    CURVE_NUM_POINTS: int = int(os.getenv("CURVE_NUM_POINTS", 25))
    CURVE_BUFFER_DIVISOR: int = int(os.getenv("CURVE_BUFFER_DIVISOR", 5))  # 5 -> 20% of range width

    # Break-even solver
    BREAK_EVEN_MAX_ITERATIONS: int = int(os.getenv("BREAK_EVEN_MAX_ITERATIONS", 50))
    BREAK_EVEN_BRACKET_FACTOR: int = int(os.getenv("BREAK_EVEN_BRACKET_FACTOR", 10))

    # Price cache (oracle boundary)
    PRICE_CACHE_TTL_SECONDS: float = float(os.getenv("PRICE_CACHE_TTL_SECONDS", 60 * 60))
    PRICE_CACHE_MAX_ENTRIES: int = int(os.getenv("PRICE_CACHE_MAX_ENTRIES", 100))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()


# Create global settings instance
settings = Settings()


def configure_logging(level: str = None) -> None:
    """Attach a stream handler to the package logger.

    The library itself never configures handlers; applications call this once.
    """
    logger = logging.getLogger("uniswap_v3_valuation")
    logger.setLevel(level or settings.LOG_LEVEL)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
