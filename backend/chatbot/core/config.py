from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "AsomiX28 Chatbot"
    app_version: str = "1.0.0"
    debug: bool = False

    # Paths
    data_dir: Path = Path(__file__).resolve().parent.parent.parent / "data"
    db_path: Path = Path(__file__).resolve().parent.parent.parent / "data" / "chatbot.db"

    # Admin (plaintext shared secret)
    admin_password: str = "123"
    admin_session_max_age_hours: int = 24

    # Widget
    welcome_message: str = (
        "Hello! Welcome to AsomiX28 Chatbot. I'm here to help you with any questions "
        "or tasks you might have. How can I assist you today?"
    )
    max_free_images_per_day: int = 5

    # Storage
    storage_backend: str = "sqlite"  # sqlite | memory
    storage_namespace: str = "asomix28_chat_data"
    export_file_prefix: str = "asomix28"

    # Providers
    reply_provider: str = "simulated"
    image_provider: str = "simulated"
    reply_delay_min: float = 1.0
    reply_delay_max: float = 3.0

    # External generation endpoints (not called, kept for a real integration)
    text_api_url: str = "https://api.openai.com/v1/chat/completions"
    text_api_key: str = ""
    text_model: str = "gpt-3.5-turbo"
    image_api_url: str = "https://api.openai.com/v1/images/generations"
    image_api_key: str = ""

    # Server
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "CHATBOT_",
    }


settings = Settings()
