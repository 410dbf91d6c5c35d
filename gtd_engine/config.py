from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    environment: str = "development"
    log_level: str = "INFO"
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # Payment rates (percent)
    vat_rate: float = 12.0
    default_duty_rate: float = 15.0
    customs_fee_rate: float = 0.2

    # Customs fee bounds (national currency)
    customs_fee_min: float = 50_000.0
    customs_fee_max: float = 3_000_000.0

    # Customs value
    transport_cost_uplift: float = 1.05

    # Autofill
    autofill_min_confidence: float = 0.0
    low_confidence_threshold: float = 0.7


settings = Settings()
