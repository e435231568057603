from pathlib import Path
from typing import Optional, List
from pydantic import field_validator
from pydantic_settings import BaseSettings

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """Application configuration with environment variable support"""

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    RELOAD: bool = False
    LOG_LEVEL: str = "INFO"

    # AI analysis settings
    OPENAI_API_KEY: Optional[str] = None
    ENABLE_AI: bool = True
    AI_MODEL: str = "gpt-4o-mini"
    AI_TEMPERATURE: float = 0.7
    AI_TIMEOUT_SECONDS: float = 30.0

    # Matching settings
    TIE_BREAK_SCALE: float = 0.1  # must stay below 1, raw scores are integers
    TOP_TRAITS_COUNT: int = 3

    # Catalog files
    QUESTIONS_FILE: str = str(DATA_DIR / "questions.json")
    SCHOOLS_FILE: str = str(DATA_DIR / "schools.json")

    # CORS settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("TIE_BREAK_SCALE")
    @classmethod
    def _check_tie_break_scale(cls, value: float) -> float:
        if not 0.0 < value < 1.0:
            raise ValueError(f"TIE_BREAK_SCALE must be between 0 and 1 (exclusive), got {value}")
        return value

    @field_validator("TOP_TRAITS_COUNT")
    @classmethod
    def _check_top_traits_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"TOP_TRAITS_COUNT must be at least 1, got {value}")
        return value

    @property
    def ai_configured(self) -> bool:
        return self.ENABLE_AI and bool(self.OPENAI_API_KEY)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
