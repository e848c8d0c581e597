from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    env: str = "dev"
    database_url: str = "sqlite:///./cibercontrol.db"
    backend_cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"
    seed_demo: bool = False

    # Dia contable: empieza a las 06:00 hora de Lima (UTC-5, sin horario de verano)
    business_utc_offset_hours: int = -5
    business_day_start_hour: int = 6
    currency_symbol: str = "S/"

    # Solo las lecturas se reintentan; una escritura ambigua nunca se repite
    store_read_retries: int = 2
    store_retry_backoff: float = 0.2

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        origins = self.backend_cors_origins
        return [origin.strip() for origin in origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
