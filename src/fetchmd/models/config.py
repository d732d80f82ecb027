"""Pydantic configuration models for fetchmd."""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class ByteSize(int):
    """
    Custom type that parses human-readable byte sizes.

    Accepts:
        - Integers (bytes)
        - Strings like '200kb', '1mb', '5gb'

    Examples:
        >>> ByteSize._parse('200kb')
        204800
        >>> ByteSize._parse('5mb')
        5242880
        >>> ByteSize._parse(1024)
        1024
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> Any:
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(cls._parse)

    @classmethod
    def _parse(cls, v: Any) -> int:
        if isinstance(v, bool):
            raise ValueError(f"Invalid byte size: {v}")
        if isinstance(v, int):
            if v < 0:
                raise ValueError(f"Byte size must not be negative: {v}")
            return v
        if isinstance(v, str):
            v = v.lower().strip()
            # Order matters: check longer suffixes first
            units = [("gb", 1024**3), ("mb", 1024**2), ("kb", 1024), ("b", 1)]
            for unit, mult in units:
                if v.endswith(unit):
                    num_str = v[: -len(unit)].strip()
                    try:
                        size = int(float(num_str) * mult)
                    except (ValueError, OverflowError) as err:
                        raise ValueError(f"Invalid number in byte size: {v}") from err
                    return cls._parse(size)
            try:
                size = int(v)
            except ValueError:
                pass
            else:
                return cls._parse(size)
        raise ValueError(f"Invalid byte size: {v}. Use format like '200kb', '5mb', or integer bytes.")


DEFAULT_TIMEOUT_MS = 15_000
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_MAX_REDIRECTS = 5


class FetchBudget(BaseModel):
    """Time, size and redirect limits for one fetch call."""

    timeout_ms: int = Field(DEFAULT_TIMEOUT_MS, ge=1, description="Per-hop timeout in milliseconds")
    max_bytes: ByteSize = Field(
        DEFAULT_MAX_BYTES,
        description="Maximum response body size (e.g., '500kb', '5mb')",
    )
    max_redirects: int = Field(DEFAULT_MAX_REDIRECTS, ge=0, description="Maximum redirect hops")

    model_config = {"extra": "forbid", "frozen": True}

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class RenderConfig(BaseModel):
    """Configuration for headless browser rendering."""

    timeout_ms: int = Field(30_000, ge=1, description="Page load timeout in milliseconds")
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        "networkidle",
        description="Navigation event to wait for",
    )
    headless: bool = Field(True, description="Run Chromium headless")

    model_config = {"extra": "forbid"}


class FetchmdConfig(BaseModel):
    """
    Root configuration model for fetchmd.

    Example:
        config = FetchmdConfig(
            budget=FetchBudget(timeout_ms=5000, max_bytes="1mb"),
            json_output=True,
        )
    """

    budget: FetchBudget = Field(default_factory=FetchBudget)
    render: RenderConfig = Field(default_factory=RenderConfig)

    raw: bool = Field(False, description="Convert the full document, skip article extraction")
    stats: bool = Field(False, description="Print word/token/size statistics to stderr")
    json_output: bool = Field(False, description="Emit JSON instead of Markdown")
    render_js: bool = Field(False, description="Render URL inputs in a headless browser")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}
