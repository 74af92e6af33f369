"""
Configuration management for the AltGen gateway.

Loads environment variables from .env file and provides typed access to configuration.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class ConfigurationError(Exception):
    """A provider was requested but its settings are missing."""
    pass


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration class for the AltGen gateway."""

    # OpenRouter (LLM text generation + image analysis)
    OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
    OPENROUTER_API_URL = os.getenv(
        "OPENROUTER_API_URL", "https://openrouter.ai/api/v1/chat/completions"
    )
    OPENROUTER_REFERER = os.getenv("OPENROUTER_REFERER", "http://localhost:8000")
    OPENROUTER_TITLE = os.getenv("OPENROUTER_TITLE", "AltGen")

    # CNN classification service
    CNN_API_URL = os.getenv("CNN_API_URL", "")
    CNN_TIMEOUT_S = float(os.getenv("CNN_TIMEOUT_S", "60"))
    USE_CNN_DEFAULT = _as_bool(os.getenv("USE_CNN_DEFAULT", "true"))

    # Google Vision
    GOOGLE_VISION_API_KEY = os.getenv("GOOGLE_VISION_API_KEY", "")
    GOOGLE_VISION_API_URL = os.getenv(
        "GOOGLE_VISION_API_URL", "https://vision.googleapis.com/v1/images:annotate"
    )

    # Replicate
    REPLICATE_API_KEY = os.getenv("REPLICATE_API_KEY", "")
    REPLICATE_API_URL = os.getenv("REPLICATE_API_URL", "https://api.replicate.com/v1")
    REPLICATE_MODEL_VERSION = os.getenv(
        "REPLICATE_MODEL_VERSION",
        "e5caf557dd9e5dcee46442e1315291ef1867f027991ede8ff95e304d4f734200",
    )
    REPLICATE_POLL_INTERVAL_S = float(os.getenv("REPLICATE_POLL_INTERVAL_S", "2"))
    REPLICATE_MAX_POLL_ATTEMPTS = int(os.getenv("REPLICATE_MAX_POLL_ATTEMPTS", "150"))
    REPLICATE_POLL_TIMEOUT_S = float(os.getenv("REPLICATE_POLL_TIMEOUT_S", "300"))

    # Outbound HTTP
    PROVIDER_TIMEOUT_S = float(os.getenv("PROVIDER_TIMEOUT_S", "60"))

    # Gateway API Configuration
    GATEWAY_PORT = int(os.getenv("GATEWAY_PORT", "8000"))
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5256").split(",")
        if origin.strip()
    ]

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def require(cls, *keys: str) -> None:
        """
        Ensure every named setting is non-empty.

        Raises:
            ConfigurationError: naming all missing keys
        """
        missing = [key for key in keys if not getattr(cls, key, None)]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )

    @classmethod
    def configured_providers(cls) -> dict:
        """Which providers have the settings they need."""
        return {
            "openrouter": bool(cls.OPENROUTER_API_KEY and cls.OPENROUTER_API_URL),
            "cnn": bool(cls.CNN_API_URL),
            "google_vision": bool(cls.GOOGLE_VISION_API_KEY),
            "replicate": bool(cls.REPLICATE_API_KEY),
        }

    @classmethod
    def validate(cls) -> bool:
        """Validate that the core LLM provider is configured."""
        try:
            cls.require("OPENROUTER_API_KEY", "OPENROUTER_API_URL")
        except ConfigurationError:
            return False
        return True


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  OpenRouter API Key: {'✓ Set' if Config.OPENROUTER_API_KEY else '✗ Missing'}")
    print(f"  OpenRouter URL: {Config.OPENROUTER_API_URL}")
    print(f"  CNN API URL: {Config.CNN_API_URL or '✗ Missing'}")
    print(f"  Gateway Port: {Config.GATEWAY_PORT}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    for name, ok in Config.configured_providers().items():
        print(f"  {name}: {'✓' if ok else '✗'}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
