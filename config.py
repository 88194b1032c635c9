import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("BOOKS_API_HOST", "localhost")
    api_port: int = int(os.getenv("BOOKS_API_PORT", "8080"))

    # Database settings
    database_file: str = os.getenv("BOOKS_DB_FILE", "books.db")
    database_max_connections: int = int(os.getenv("BOOKS_DB_MAX_CONNECTIONS", "10"))

    # Application settings
    app_name: str = os.getenv("BOOKS_APP_NAME", "Books API")
    log_level: str = os.getenv("BOOKS_LOG_LEVEL", "INFO").upper()


settings = Settings()
