from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str

    # CORS origins as a JSON list, e.g. ["http://localhost:3000"]
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    LOG_LEVEL: str = "INFO"

    # Inventory ledger
    INVENTORY_DEFAULT_UNIT: str = "liters"
    # Event subscriptions; off until the host application opts in
    INVENTORY_AUTO_FROM_PICKUP: bool = False
    INVENTORY_AUTO_FROM_DELIVERY: bool = False


settings = Settings()  # type: ignore[call-arg]
