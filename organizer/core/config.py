from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Organizer API"
    ENVIRONMENT: str = "production"

    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    FRONTEND_URL: str = ""

    # защита /api/auth/login от перебора
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_WINDOW_MINUTES: int = 15
    LOGIN_BLOCK_MINUTES: int = 30
    LOGIN_SWEEP_INTERVAL_SECONDS: int = 60

    # лимиты запросов: количество и окно в минутах
    GENERAL_RATE_LIMIT: int = 1000
    GENERAL_RATE_WINDOW_MINUTES: int = 15
    AUTH_RATE_LIMIT: int = 50
    AUTH_RATE_WINDOW_MINUTES: int = 15
    LOGIN_RATE_LIMIT: int = 10
    LOGIN_RATE_WINDOW_MINUTES: int = 15
    REGISTER_RATE_LIMIT: int = 5
    REGISTER_RATE_WINDOW_MINUTES: int = 60

    MAX_BODY_BYTES: int = 10 * 1024

    @property
    def CORS_ORIGINS(self) -> list[str]:
        origins = [self.FRONTEND_URL, "http://localhost:3000", "http://localhost:5173"]
        return [o.rstrip("/") for o in origins if o]

    @property
    def DEBUG(self) -> bool:
        return self.ENVIRONMENT == "development"


settings = Settings()
