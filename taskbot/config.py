from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    dev_polling: bool = False
    telegram_bot_token: str = ""
    telegram_bot_username: str = ""
    base_url: str = ""
    webhook_path: str = "/webhook"
    port: int = 3000
    timezone: str = "Europe/Berlin"
    log_path: str = "logs/app.log"
    debug: bool = False
    heartbeat_interval_sec: int = 0

    google_sheet_id: str = ""
    google_sheet_name: str = ""
    google_credentials: str = ""
    google_credentials_file: str = ""
    google_scopes: list[str] = ["https://www.googleapis.com/auth/spreadsheets"]
    sheet_url: str = ""

    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "openai/gpt-4o-mini"
    llm_timeout_seconds: float = 20.0
    llm_tool_temperature: float = 0.2
    llm_chat_temperature: float = 0.7
    llm_context_mode: str = "full"
    llm_plan_enabled: bool = False
    llm_evaluate_enabled: bool = False

    known_people: list[str] = ["Jeremy", "Julia"]
    default_assignee: str = "shared"
    undo_window_sec: int = 300


settings = Settings()
