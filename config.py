"""Configuration for the labeled metrics exporter"""
import re
from pathlib import Path
from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from metrics.buckets import new_buckets


METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")


class Config(BaseSettings):
    """Configuration class with Pydantic validation and environment-based settings"""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    # Server settings
    metrics_port: int = Field(default=9100, ge=1, le=65535, description="Metrics server port")
    metrics_host: str = Field(default="0.0.0.0", description="Metrics server host")

    # Service settings
    service_name: str = Field(default="labeled-metrics-exporter", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Log file path (stdout only when unset)")
    enable_request_logging: bool = Field(default=True, description="Enable HTTP request logging")

    # Self instrumentation
    http_metric_name: str = Field(default="metrics_http", description="Complex metric recording HTTP requests")
    bucket_start: float = Field(default=0.001, gt=0, description="Upper bound of the first latency bucket, in seconds")
    bucket_factor: float = Field(default=2.0, gt=1, description="Growth factor between latency buckets")
    bucket_count: int = Field(default=16, ge=1, description="Number of latency buckets")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("log_file")
    @classmethod
    def ensure_parent_directory(cls, v):
        """Ensure the parent directory exists for the log file"""
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("http_metric_name")
    @classmethod
    def validate_metric_name(cls, v):
        if not METRIC_NAME_RE.match(v):
            raise ValueError(f"invalid metric name: {v!r}")
        return v

    def latency_buckets(self) -> List[float]:
        """Histogram bounds used for request latencies"""
        return new_buckets(self.bucket_start, self.bucket_factor, self.bucket_count)
