"""Root settings model for tastychat configuration."""

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from tastychat.config.models.api import APIConfig
from tastychat.config.models.engine import (
    ClassifierConfig,
    ContextWindowConfig,
    GenerationConfig,
    GuardrailsConfig,
    ProactiveConfig,
    RetrievalConfig,
    SupportConfig,
    ToolsConfig,
)
from tastychat.config.models.providers import ProvidersConfig

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration read by TomlConfigSettingsSource."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the merged TOML files."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object.

    Priority (highest first): constructor args, TASTYCHAT_* env vars,
    config/*.toml, model defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TASTYCHAT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="tastychat", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: LogLevel = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="json", description="Log renderer"
    )

    api: APIConfig = Field(default_factory=APIConfig, description="HTTP server configuration")
    providers: ProvidersConfig = Field(
        default_factory=ProvidersConfig, description="Model provider configuration"
    )
    classifier: ClassifierConfig = Field(
        default_factory=ClassifierConfig, description="Intent classifier tuning"
    )
    context_window: ContextWindowConfig = Field(
        default_factory=ContextWindowConfig, description="Context window budget"
    )
    guardrails: GuardrailsConfig = Field(
        default_factory=GuardrailsConfig, description="Guardrail thresholds"
    )
    generation: GenerationConfig = Field(
        default_factory=GenerationConfig, description="Response generation limits"
    )
    tools: ToolsConfig = Field(default_factory=ToolsConfig, description="Tool loop limits")
    retrieval: RetrievalConfig = Field(
        default_factory=RetrievalConfig, description="Knowledge retrieval"
    )
    proactive: ProactiveConfig = Field(
        default_factory=ProactiveConfig, description="Proactive help throttling"
    )
    support: SupportConfig = Field(
        default_factory=SupportConfig, description="Ticketing and notifications"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
