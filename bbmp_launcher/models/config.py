"""
Pydantic models for launcher configuration and launch requests.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator

from bbmp_launcher.utils.path import get_data_dir

DEFAULT_RELEASE_URL = (
    "https://api.github.com/repos/BlueBerryCodingGroup/BBMP/releases/latest"
)
DEFAULT_SERVER = "play.hypixel.net"
DEFAULT_PORT = 25565
PRODUCT_NAME = "BlueBerryMinecraftProxy"


def _check_port(v: int) -> int:
    if v < 1 or v > 65535:
        raise ValueError(f"Port must be between 1 and 65535, but got: {v}")
    return v


class LauncherConfig(BaseModel):
    """A validated configuration model for the launcher."""

    # Launch defaults
    server: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    rport: int = DEFAULT_PORT
    devmode: bool = False
    java_path: str = ""
    custom_url: str = ""

    # Window
    always_on_top: bool = False

    # Release & runtime sources
    release_url: str = DEFAULT_RELEASE_URL
    product_name: str = PRODUCT_NAME
    runtime_version: int = 17
    user_agent: str = "BBMP-Launcher"

    # Network knobs (0 means unlimited / no deadline)
    max_redirects: int = 0
    request_timeout: float = 0

    data_dir: str = Field(default_factory=lambda: str(get_data_dir()))

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("port", "rport")
    @classmethod
    def validate_ports(cls, v: int) -> int:
        """Ensures ports are in the valid TCP range."""
        return _check_port(v)

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        if not v:
            raise ValueError("Server address cannot be empty.")
        return v

    @field_validator("release_url")
    @classmethod
    def validate_release_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Release URL must be http(s), but got: {v}")
        return v

    @field_validator("custom_url")
    @classmethod
    def validate_custom_url(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"Custom JAR URL must be http(s), but got: {v}")
        return v

    @field_validator("max_redirects", "request_timeout")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("Network limits cannot be negative (use 0 to disable).")
        return v

    @field_validator("runtime_version")
    @classmethod
    def validate_runtime_version(cls, v: int) -> int:
        if v < 8:
            raise ValueError("Runtime version must be 8 or newer.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}


class LaunchOptions(BaseModel):
    """Arguments of a single launch request."""

    server: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    rport: int = DEFAULT_PORT
    devmode: bool = False
    java_path: str | None = None

    class Config:
        str_strip_whitespace = True

    @field_validator("port", "rport", mode="before")
    @classmethod
    def default_unset_ports(cls, v):
        # UI payloads send null or 0 for a cleared port field
        return DEFAULT_PORT if v is None or v == 0 else v

    @field_validator("server", mode="before")
    @classmethod
    def default_unset_server(cls, v):
        return DEFAULT_SERVER if v is None else v

    @field_validator("devmode", mode="before")
    @classmethod
    def default_unset_devmode(cls, v):
        return False if v is None else v

    @field_validator("port", "rport")
    @classmethod
    def validate_ports(cls, v: int) -> int:
        return _check_port(v)

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        # An empty server falls back to the default, like an unset field
        return v or DEFAULT_SERVER

    @field_validator("java_path")
    @classmethod
    def validate_java_path(cls, v: str | None) -> str | None:
        return v or None

    @classmethod
    def from_config(cls, config: LauncherConfig, **overrides) -> "LaunchOptions":
        """Builds launch options from saved defaults plus explicit overrides."""
        values = {
            "server": config.server,
            "port": config.port,
            "rport": config.rport,
            "devmode": config.devmode,
            "java_path": config.java_path or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
