from __future__ import annotations

import logging
import os
import stat
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from shared.constants import DEFAULT_MEASUREMENT, DEFAULT_METHOD, DEFAULT_TIMEOUT_SECONDS, DEFAULT_URL, HTTP_METHODS

logger = logging.getLogger("goruntime.config")

PASSWORD_ENV = "GORUNTIME_PASSWORD"


class EndpointConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str
    method: str = DEFAULT_METHOD
    username: str = ""
    password: str = Field(default="", repr=False)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    measurement: str = ""

    @property
    def measurement_name(self) -> str:
        return self.measurement or DEFAULT_MEASUREMENT

    @property
    def has_credentials(self) -> bool:
        return bool(self.username or self.password)


class CollectorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    urls: list[str] = Field(default_factory=lambda: [DEFAULT_URL])
    method: str = DEFAULT_METHOD
    measurement: str = ""
    username: str = ""
    password: str = Field(default="", repr=False)
    tls_ca: str | None = None
    tls_cert: str | None = None
    tls_key: str | None = None
    insecure_skip_verify: bool = False
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0, le=300)
    interval_seconds: int = Field(default=10, ge=1, le=3600)
    metrics_port: int = Field(default=0, ge=0, le=65535)

    @field_validator("urls")
    @classmethod
    def validate_urls(cls, value: list[str]) -> list[str]:
        cleaned: list[str] = []
        for entry in value:
            url = entry.strip()
            if not url:
                raise ValueError("urls cannot contain empty entries")
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"url {url!r} must use http:// or https://")
            cleaned.append(url)
        return cleaned

    @field_validator("method")
    @classmethod
    def validate_method(cls, value: str) -> str:
        method = value.strip().upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"unsupported HTTP method {value!r}")
        return method

    @field_validator("measurement")
    @classmethod
    def strip_measurement(cls, value: str) -> str:
        return value.strip()

    @field_validator("tls_ca", "tls_cert", "tls_key")
    @classmethod
    def blank_path_is_unset(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return str(Path(value.strip()).expanduser())

    @model_validator(mode="after")
    def validate_key_pair(self) -> "CollectorConfig":
        if bool(self.tls_cert) != bool(self.tls_key):
            raise ValueError("tls_cert and tls_key must be set together")
        return self

    def has_plain_http_credentials(self) -> bool:
        if not (self.username or self.password):
            return False
        return any(url.startswith("http://") for url in self.urls)

    def endpoints(self) -> list[EndpointConfig]:
        return [
            EndpointConfig(
                url=url,
                method=self.method,
                username=self.username,
                password=self.password,
                timeout_seconds=self.timeout_seconds,
                measurement=self.measurement,
            )
            for url in self.urls
        ]


def default_config_dir() -> Path:
    return Path.home() / ".goruntime"


def default_config_path() -> Path:
    return default_config_dir() / "config.toml"


def _secure_path(path: Path, mode: int) -> None:
    if os.name == "nt":
        return
    path.chmod(mode)
    actual = stat.S_IMODE(path.stat().st_mode)
    if actual != mode:
        raise PermissionError(f"unable to set permissions {oct(mode)} for {path}")


def sample_config() -> str:
    return (
        "# Read runtime statistics from one or more endpoints\n"
        "## One or more URLs serving runtime statistics as JSON\n"
        f'urls = ["{DEFAULT_URL}"]\n'
        "\n"
        "## HTTP method\n"
        f'# method = "{DEFAULT_METHOD}"\n'
        "\n"
        f'## Measurement name; "{DEFAULT_MEASUREMENT}" when empty\n'
        'measurement = ""\n'
        "\n"
        "## Optional HTTP Basic Auth credentials (GORUNTIME_PASSWORD overrides password)\n"
        '# username = "username"\n'
        '# password = "pa$$word"\n'
        "\n"
        "## Optional TLS config\n"
        '# tls_ca = "/etc/goruntime/ca.pem"\n'
        '# tls_cert = "/etc/goruntime/cert.pem"\n'
        '# tls_key = "/etc/goruntime/key.pem"\n'
        "## Use TLS but skip chain & host verification\n"
        "# insecure_skip_verify = false\n"
        "\n"
        "## Amount of time allowed to complete the HTTP request\n"
        f"timeout_seconds = {DEFAULT_TIMEOUT_SECONDS}\n"
        "\n"
        "## Seconds between poll cycles when running as a daemon\n"
        "interval_seconds = 10\n"
        "\n"
        "## Port for the collector's own Prometheus metrics; 0 disables\n"
        "metrics_port = 0\n"
    )


def init_config(config_path: Path | None = None) -> Path:
    path = (config_path or default_config_path()).expanduser().resolve(strict=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    _secure_path(path.parent, 0o700)
    if path.exists():
        _secure_path(path, 0o600)
        return path
    path.write_text(sample_config(), encoding="utf-8")
    _secure_path(path, 0o600)
    return path


def load_config(config_path: Path | None = None) -> CollectorConfig:
    path = init_config(config_path)
    try:
        with path.open("rb") as handle:
            raw: dict[str, Any] = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"invalid config file {path}: {exc}") from exc

    env_password = os.getenv(PASSWORD_ENV)
    if env_password:
        raw["password"] = env_password

    try:
        config = CollectorConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"invalid config file {path}: {exc}") from exc

    if config.insecure_skip_verify:
        logger.warning("insecure_skip_verify is enabled; TLS peers are not verified")
    if config.has_plain_http_credentials():
        logger.warning("basic auth credentials are sent over plain HTTP")
    return config
