from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Cidade Viva Navigation API"
    debug: bool = False
    # CORS: "*" for dev; in production set to comma-separated origins, e.g. "https://app.example.com,https://admin.example.com"
    cors_origins: str = "*"

    # Optional API key auth. When enabled, requests must include X-API-Key or Authorization: Bearer <key>.
    api_key_required: bool = False
    api_keys: str = ""  # Comma-separated list of valid keys (no spaces). Example: API_KEYS=key1,key2

    # Directions provider used by HTTPRouteProvider
    route_api_base_url: str = "http://localhost:8000"
    route_api_key: str = ""
    route_api_timeout_seconds: float = Field(default=10.0, gt=0)
    route_api_retry_attempts: int = Field(default=3, ge=1)

    # Map viewport (degrees)
    route_padding: float = Field(default=1.3, ge=1.0)
    min_span: float = Field(default=0.01, gt=0)
    max_span: float = Field(default=60.0, gt=0)
    zoom_factor: float = Field(default=2.0, gt=1.0)
    focus_span: float = Field(default=0.01, gt=0)  # Span used when centring on a single camera/alert/user location

    # Fallback estimator: straight-line distance at city-average speed when the provider fails
    fallback_enabled: bool = True
    driving_speed_mps: float = Field(default=8.3, gt=0)
    walking_speed_mps: float = Field(default=1.4, gt=0)
    transit_speed_mps: float = Field(default=5.6, gt=0)

    @model_validator(mode="after")
    def check_spans(self) -> "Settings":
        if self.min_span > self.max_span:
            raise ValueError("min_span must be <= max_span")
        if not (self.min_span <= self.focus_span <= self.max_span):
            raise ValueError("focus_span must lie within [min_span, max_span]")
        return self


def get_settings() -> Settings:
    return Settings()
