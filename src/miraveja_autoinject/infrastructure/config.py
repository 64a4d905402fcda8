"""Infrastructure layer - Settings of the command line tool."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from miraveja_autoinject.domain import GeneratorOptions


class AutoInjectSettings(BaseSettings):
    """Settings read from ``AUTOINJECT_*`` environment variables.

    Command line options take precedence over these values.

    Attributes:
        namespace: Package the generated modules are placed in.
        routine_name: Name of the generated registration function.
        services_parameter: Name of the function's service collection parameter.
        source_dir: Source root to scan.
        output_dir: Directory generated packages are written to, defaults to ``source_dir``.
        exclude: Directory names never scanned.
        log_level: Logging level name.

    Example:
        >>> # AUTOINJECT_NAMESPACE=myapp.generated
        >>> AutoInjectSettings().to_generator_options().registration_module
        'myapp.generated.registration'
    """

    model_config = SettingsConfigDict(env_prefix="AUTOINJECT_", extra="ignore")

    namespace: str = Field(default="autoinject", min_length=1)
    routine_name: str = Field(default="auto_inject", min_length=1)
    services_parameter: str = Field(default="services", min_length=1)
    source_dir: Path = Path("src")
    output_dir: Optional[Path] = None
    exclude: List[str] = Field(default_factory=lambda: ["tests", "build", "dist"])
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{value}'")
        return level

    def to_generator_options(self) -> GeneratorOptions:
        """Build the generator options, validating the configured names.

        Raises:
            pydantic.ValidationError: If a name is not a valid identifier.
        """
        return GeneratorOptions(
            namespace=self.namespace,
            routine_name=self.routine_name,
            services_parameter=self.services_parameter,
        )
