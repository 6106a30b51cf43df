from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MIDTRANS_SERVER_KEY = "SB-Mid-server-dev-key-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="CHECKOUT_", extra="ignore")

    app_name: str = "QRIS Checkout"
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    log_level: str = "INFO"

    # Gateway backend: midtrans | fake
    gateway_backend: str = "midtrans"
    midtrans_server_key: str = Field(
        default=DEFAULT_MIDTRANS_SERVER_KEY,
        description="Server key used for Basic auth and notification signatures",
    )
    midtrans_client_key: str = ""
    midtrans_is_production: bool = False
    gateway_timeout_seconds: float = 15.0

    min_amount: int = 1000
    expiry_minutes: int = 15
    default_item_name: str = "Produk"
    item_name_max_length: int = 50
    poll_interval_ms: int = 3000

    # Keep terminal statuses once reached instead of overwriting them.
    guard_final_status: bool = False

    @property
    def core_api_base_url(self) -> str:
        if self.midtrans_is_production:
            return "https://api.midtrans.com"
        return "https://api.sandbox.midtrans.com"

    @property
    def snap_base_url(self) -> str:
        if self.midtrans_is_production:
            return "https://app.midtrans.com"
        return "https://app.sandbox.midtrans.com"

    def model_post_init(self, __context) -> None:
        if self.env.lower() == "dev":
            return

        if self.gateway_backend == "midtrans" and self.midtrans_server_key == DEFAULT_MIDTRANS_SERVER_KEY:
            raise ValueError(
                "insecure default secrets are not allowed outside dev mode; set env vars: "
                "CHECKOUT_MIDTRANS_SERVER_KEY"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
