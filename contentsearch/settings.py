"""
Search settings.

Two pieces of global configuration drive the indexer:

- defaultContext: variables made available to every expression, as
  name -> dotted import path (classes are instantiated, anything else is used as-is)
- defaultConfigurationPerType: per property type defaults, most importantly the
  indexing expression used when a property has none of its own

User supplied entries are merged over the shipped defaults, so a settings file only
needs to list what it changes. Setting a type's indexing to "" disables indexing
for that type, setting it to null removes the default altogether.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .utils import ConfigurationError, PathLike, read_json

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "CONTENTSEARCH_SETTINGS"

DEFAULT_CONTEXT: dict[str, str] = {
    "Indexing": "contentsearch.eel.indexing_helper:IndexingHelper",
}

DEFAULT_CONFIGURATION_PER_TYPE: dict[str, dict[str, Any]] = {
    "string": {"indexing": "${value}"},
    "boolean": {"indexing": "${value}"},
    "integer": {"indexing": "${value}"},
    "float": {"indexing": "${value}"},
    "DateTime": {"indexing": "${value.isoformat() if value is not None else None}"},
}


class TypeDefaultConfiguration(BaseModel):
    """Defaults applied to every property declaring a given type."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    indexing: Optional[str] = Field(
        default=None,
        description="Indexing expression used when the property has none",
    )


class SearchSettings(BaseModel):
    """Validated global settings of the indexer."""
    model_config = ConfigDict(populate_by_name=True)

    default_context: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CONTEXT),
        alias="defaultContext",
        description="Expression variable name -> dotted import path",
    )
    default_configuration_per_type: dict[str, TypeDefaultConfiguration] = Field(
        default_factory=lambda: {
            name: TypeDefaultConfiguration(**config)
            for name, config in DEFAULT_CONFIGURATION_PER_TYPE.items()
        },
        alias="defaultConfigurationPerType",
        description="Property type name -> default configuration",
    )

    @field_validator("default_context", mode="before")
    @classmethod
    def _merge_default_context(cls, value: Any) -> Any:
        if value is None:
            return dict(DEFAULT_CONTEXT)
        if isinstance(value, dict):
            return {**DEFAULT_CONTEXT, **value}
        return value

    @field_validator("default_configuration_per_type", mode="before")
    @classmethod
    def _merge_type_defaults(cls, value: Any) -> Any:
        if value is None:
            return dict(DEFAULT_CONFIGURATION_PER_TYPE)
        if isinstance(value, dict):
            return {**DEFAULT_CONFIGURATION_PER_TYPE, **value}
        return value

    def default_indexing_expression(self, property_type: Optional[str]) -> Optional[str]:
        """
        Get the default indexing expression for a property type.

        Returns None when the type is unknown or has no indexing default; an
        empty string is returned as-is (it means "do not index").
        """
        if property_type is None:
            return None
        type_defaults = self.default_configuration_per_type.get(property_type)
        if type_defaults is None:
            return None
        return type_defaults.indexing


def load_settings(path: Optional[PathLike] = None) -> SearchSettings:
    """
    Load settings from a JSON file.

    Falls back to the file named by CONTENTSEARCH_SETTINGS, and to the shipped
    defaults when neither is given.

    Raises:
        ConfigurationError: If the file contents fail validation
    """
    if path is None:
        path = os.getenv(SETTINGS_ENV_VAR) or None

    if path is None:
        logger.debug("No settings file given, using defaults")
        return SearchSettings()

    path = Path(path)
    data = read_json(path)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")

    try:
        settings = SearchSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {path}: {e}") from e

    logger.debug(f"Loaded settings from {path}")
    return settings
