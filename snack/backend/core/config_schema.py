"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema   → application.yaml
    DatabaseSchema      → database.yaml
    LoggingSchema       → logging.yaml
    FeaturesSchema      → features.yaml
    SecuritySchema      → security.yaml
    PaymentsSchema      → payments.yaml
    IntegrationsSchema  → integrations.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class PaginationSchema(_StrictBase):
    default_limit: int
    max_limit: int


class TimeoutsSchema(_StrictBase):
    database: int
    external_api: int
    health_check: int


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    docs_enabled: bool
    public_url: str
    server: ServerSchema
    cors: CorsSchema
    pagination: PaginationSchema
    timeouts: TimeoutsSchema


# =============================================================================
# database.yaml
# =============================================================================


class DatabaseSchema(_StrictBase):
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool
    echo_pool: bool


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: Literal["json", "console"]
    handlers: HandlersSchema
    library_levels: dict[str, str] = {}
    redact_keys: list[str] = []


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    auth_rate_limit_enabled: bool
    api_detailed_errors: bool
    api_request_logging: bool
    security_startup_checks_enabled: bool
    security_cors_enforce_production: bool
    payments_enabled: bool
    emails_enabled: bool
    link_previews_enabled: bool
    extension_enabled: bool
    analytics_enabled: bool
    ai_summaries_enabled: bool


# =============================================================================
# security.yaml
# =============================================================================


class JwtSchema(_StrictBase):
    algorithm: str
    access_token_expire_minutes: int
    refresh_token_expire_days: int
    audience: str


class RateLimitRuleSchema(_StrictBase):
    requests: int
    window_seconds: int


class RateLimitingSchema(_StrictBase):
    auth: RateLimitRuleSchema
    api: RateLimitRuleSchema
    write: RateLimitRuleSchema
    read: RateLimitRuleSchema
    upload: RateLimitRuleSchema


class SecretsValidationSchema(_StrictBase):
    jwt_secret_min_length: int


class CorsEnforcementSchema(_StrictBase):
    enforce_in_production: bool
    allow_methods: list[str]
    allow_headers: list[str]


class ExtensionAuthSchema(_StrictBase):
    access_token_expire_hours: int
    refresh_token_expire_days: int
    auth_code_expire_minutes: int
    allowed_callback_prefixes: list[str]
    allow_methods: list[str]
    allow_headers: list[str]


class SecuritySchema(_StrictBase):
    jwt: JwtSchema
    rate_limiting: RateLimitingSchema
    secrets_validation: SecretsValidationSchema
    cors: CorsEnforcementSchema
    extension: ExtensionAuthSchema


# =============================================================================
# payments.yaml
# =============================================================================


class CurrencySchema(_StrictBase):
    symbol: str
    name: str
    decimals: int


class PaymentsSchema(_StrictBase):
    platform_fee_percentage: float
    min_price_cents: int
    max_price_cents: int
    min_payout_cents: int
    default_currency: str
    statement_descriptor: str
    store_takehome_percentage: float = 0.70
    currencies: dict[str, CurrencySchema]


# =============================================================================
# integrations.yaml
# =============================================================================


class OpenGraphSchema(_StrictBase):
    user_agent: str
    timeout_seconds: float
    favicon_service_url: str


class EmailSchema(_StrictBase):
    api_base_url: str
    from_address: str
    timeout_seconds: float


class AvatarStorageSchema(_StrictBase):
    directory: str
    url_path: str
    max_bytes: int
    allowed_content_types: list[str]


class AiSummarySchema(_StrictBase):
    model: str
    temperature: float
    max_tokens: int
    max_links: int


class IntegrationsSchema(_StrictBase):
    opengraph: OpenGraphSchema
    email: EmailSchema
    avatars: AvatarStorageSchema
    ai_summary: AiSummarySchema
