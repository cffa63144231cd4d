"""
GiftAI Service Configuration
Loads settings from environment variables
"""

import os
from typing import List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment"""

    # OpenAI Configuration (suggestion + message collaborator)
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # RapidAPI Configuration (product search collaborator)
    RAPIDAPI_KEY: str = os.getenv("RAPIDAPI_KEY", "").strip()
    RAPIDAPI_HOST: str = os.getenv("RAPIDAPI_HOST", "real-time-amazon-data.p.rapidapi.com")
    SEARCH_COUNTRY: str = os.getenv("SEARCH_COUNTRY", "IN")

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./giftai.db")
    SEED_CATALOG: bool = os.getenv("SEED_CATALOG", "true").lower() in ("1", "true", "yes")

    # Timeouts (seconds)
    SUGGESTION_TIMEOUT: float = float(os.getenv("SUGGESTION_TIMEOUT", "30"))
    SEARCH_TIMEOUT: float = float(os.getenv("SEARCH_TIMEOUT", "15"))
    MESSAGE_TIMEOUT: float = float(os.getenv("MESSAGE_TIMEOUT", "15"))

    # Pause between sequential upstream calls in one batch
    API_CALL_DELAY_MS: int = int(os.getenv("API_CALL_DELAY_MS", "500"))

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    API_ENV: str = os.getenv("API_ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Configuration
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:5000,http://localhost:5173")

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def api_call_delay_seconds(self) -> float:
        return self.API_CALL_DELAY_MS / 1000.0

    @property
    def llm_enabled(self) -> bool:
        """An empty or placeholder key means the AI tier is skipped"""
        return bool(self.OPENAI_API_KEY) and not self.OPENAI_API_KEY.startswith("sk-your")

    @property
    def search_enabled(self) -> bool:
        return bool(self.RAPIDAPI_KEY)


# Global settings instance
settings = Settings()
