from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings come from the environment (Cloud Run / Railway style deploys).
    Credentials sent with a request take precedence over the ones here.
    """

    model_config = SettingsConfigDict(env_prefix="TG_", extra="ignore")

    # Telegram Bot API
    access_token: str | None = None
    base_url: str = "https://api.telegram.org"
    timeout: float = 60
    upload_timeout: float = 120

    # Where the host serves externally stored binary data (items with binary.id)
    binary_data_url: str | None = None

    # Link used for the "sent automatically" suffix
    attribution_base_url: str = "https://n8n.io/"

    # If set, every POST endpoint requires the `X-API-Key` header.
    api_key: str | None = None

    log_level: str = "INFO"


settings = Settings()
