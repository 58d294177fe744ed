"""Settings recognized by a Context."""

from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError

DEFAULT_DSN = "sqlite:///:memory:"


class Settings(BaseModel):
    """Connection and behaviour settings for one Context."""

    model_config = {"validate_assignment": True, "extra": "forbid"}

    dsn: str = DEFAULT_DSN
    """Database URL, e.g. ``sqlite:///path/to.db`` or ``postgresql://user@host/db``."""
    username: Optional[str] = None
    password: Optional[str] = None
    driver_options: dict[str, Any] = Field(default_factory=dict)
    """Extra keyword arguments passed to the driver's connect()."""
    quote_character: Optional[str] = None
    """Identifier quote character; detected from the driver when left unset."""
    id_column: str = "id"
    """Default primary key column."""
    id_overrides: dict[str, str] = Field(default_factory=dict)
    """Primary key column per table name, taking precedence over id_column."""
    logging: bool = False
    """Keep a log of every executed statement, with parameters bound."""
    caching: bool = False
    """Memoize SELECT results per (sql, parameters), without eviction."""

    @field_validator("quote_character")
    @classmethod
    def _single_character(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value) != 1:
            raise ValueError("quote_character must be a single character")
        return value

    @field_validator("driver_options", mode="before")
    @classmethod
    def _none_means_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def id_column_for(self, table: str) -> str:
        """Return the configured primary key column for ``table``."""
        return self.id_overrides.get(table, self.id_column)

    def update(self, key: str | dict[str, Any], value: Any = None) -> None:
        """Apply one setting, or several from a mapping.

        A single string with no value is taken as the DSN.

        Raises:
            ConfigurationError: unknown key or invalid value.
        """
        if isinstance(key, dict):
            for conf_key, conf_value in key.items():
                self.update(conf_key, conf_value)
            return
        if value is None and key not in type(self).model_fields:
            key, value = "dsn", key
        if key not in type(self).model_fields:
            raise ConfigurationError(f"Unknown setting: {key}")
        try:
            setattr(self, key, value)
        except ValidationError as error:
            raise ConfigurationError(f"Invalid value for setting {key}: {value!r}") from error
