from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://notetree:notetree@db:5432/notetree"
    database_echo: bool = False
    create_tables: bool = True

    jwt_secret: str
    jwt_algorithm: str = "HS256"

    log_level: str = "INFO"

    # Subtree propagation
    propagation_max_depth: int = 1000
    propagation_history_size: int = 1000

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
