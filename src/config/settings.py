"""
Interpreter settings, read from the environment and overridden by command-line flags.
"""

import logging
import os
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, PositiveInt, field_validator

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ENV_PREFIX = "TREFOIL_"


class TrefoilSettings(BaseModel):
    """Settings for the Trefoil driver (file runner and REPL)."""
    log_level: LogLevel = "WARNING"
    log_file: Optional[str] = None
    # Deep Trefoil recursion needs several Python frames per call.
    recursion_limit: PositiveInt = 10000
    stop_on_error: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "TrefoilSettings":
        """
        Builds settings from TREFOIL_* environment variables, then applies overrides.

        Args:
            environ: Mapping to read instead of os.environ (used by tests).
            overrides: Field values that win over the environment; None values are ignored.

        Raises:
            pydantic.ValidationError: If a value is not acceptable for its field.
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for field_name in cls.model_fields:
            env_key = ENV_PREFIX + field_name.upper()
            if env_key in environ:
                values[field_name] = environ[env_key]
        values.update({key: value for key, value in overrides.items() if value is not None})
        settings = cls(**values)
        logger.debug(f"Loaded settings: {settings.model_dump()}")
        return settings
