from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Envelope settings loaded from environment variables.

    Pydantic Settings reads env vars matching field names (case-insensitive).
    In development, it also reads from a .env file if present.
    """

    # Status code assigned to errors that carry no code of their own
    default_error_code: int = 500

    # When False, unhandled exceptions are rendered with a fixed message
    # so internal details never reach the client
    expose_internal_errors: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
