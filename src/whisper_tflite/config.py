"""Runtime settings read from the environment.

Every value can be overridden by the matching CLI flag.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from whisper_tflite.constants import DEFAULT_THREADS

ENV_PREFIX = "WHISPER_TFLITE_"

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    model_path: str | None = None
    bundle_path: str | None = None
    threads: int = DEFAULT_THREADS
    multilingual: bool = False
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from ``WHISPER_TFLITE_*`` variables.

        Raises:
            ValueError: If a numeric variable is not an integer.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value if value else None

        def get_int(name: str, default: int) -> int:
            value = get(name)
            if value is None:
                return default
            try:
                return int(value)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from None

        multilingual = get("MULTILINGUAL")
        return cls(
            model_path=get("MODEL"),
            bundle_path=get("BUNDLE"),
            threads=get_int("THREADS", defaults.threads),
            multilingual=multilingual.lower() in _TRUE if multilingual else defaults.multilingual,
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
            host=get("HOST") or defaults.host,
            port=get_int("PORT", defaults.port),
        )
