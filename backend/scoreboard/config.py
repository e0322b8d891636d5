from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SCOREBOARD_")

    database_url: str = "sqlite:///scoreboard.db"
    secret_key: str = "change-me-in-production"
    access_token_expire_minutes: int = 60
    bcrypt_rounds: int = 12

    rate_limit_default_limit: int = 100
    rate_limit_default_window_seconds: int = 60
    rate_limit_submit_limit: int = 10
    rate_limit_submit_window_seconds: int = 60
    trust_forwarded_for: bool = False

    leaderboard_default_limit: int = 10
    leaderboard_max_limit: int = 100

    allow_admin_registration: bool = True
    bootstrap_admin_username: str | None = None
    bootstrap_admin_password: str | None = None

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"


settings = Settings()
