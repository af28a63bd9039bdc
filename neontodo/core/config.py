"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# This file is at: neontodo/core/config.py
# .env is at: config/.env
BASE_DIR = Path(__file__).resolve().parent.parent.parent  # Go up to project root
ENV_FILE = BASE_DIR / "config" / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Все настройки можно переопределить через переменные окружения.
    Пример: DATABASE_URL=sqlite+aiosqlite:///./other.db uvicorn neontodo.main:app
    """

    # =========================================================================
    # Database
    # =========================================================================
    # DATABASE_URL - строка подключения к локальной базе данных
    # Для SQLite: sqlite+aiosqlite:///./neontodo.db
    # Для тестов: sqlite+aiosqlite:///:memory:
    DATABASE_URL: str = "sqlite+aiosqlite:///./neontodo.db"

    # DATABASE_ECHO - выводить SQL запросы в логи (для отладки)
    DATABASE_ECHO: bool = False

    # =========================================================================
    # Application
    # =========================================================================
    APP_NAME: str = "NeonTodo"
    DEBUG: bool = False

    # =========================================================================
    # Logging
    # =========================================================================
    # LOG_LEVEL - уровень логирования: DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_LEVEL: str = "INFO"

    # LOG_FORMAT - формат логов:
    # "json" - структурированный JSON
    # "simple" - человекочитаемый текст (для разработки)
    LOG_FORMAT: str = "json"

    # =========================================================================
    # Inbox project
    # =========================================================================
    # Проект по умолчанию, создаётся лениво при первом обращении
    INBOX_NAME: str = "Inbox"
    INBOX_COLOR: str = "#29f0ff"

    # =========================================================================
    # Backup
    # =========================================================================
    # BACKUP_DIR - папка по умолчанию для экспорта резервных копий
    BACKUP_DIR: str = "."

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", case_sensitive=True
    )


# Create global settings instance
settings = Settings()
