from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = "AI Study Buddy Backend"

    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 # 1 day
    BCRYPT_ROUNDS: int = 12

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/study_buddy.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: float = 30.0

    # OpenRouter completion provider
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_MODEL_ID: str = "openai/gpt-3.5-turbo"
    OPENROUTER_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    OPENROUTER_TIMEOUT: float = 30.0
    OPENROUTER_REFERER: str = "http://localhost:3000/"
    OPENROUTER_MAX_TOKENS: int = 1000
    OPENROUTER_TEMPERATURE: float = 0.7

    # Characters of uploaded reference text sent along with a question
    CONTEXT_EXCERPT_CHARS: int = 1500

    # Rate limiting (disabled when unset)
    REDIS_URL: Optional[str] = None

    # HTTP server
    HOST: str = "127.0.0.1"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    STATIC_DIR: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
