"""
Configuration dataclass for the Live bridge connection.

An immutable config object decouples connection parameters from the
supervisor's constructor, so one validated value can be shared by the
supervisor, the auto-connect timer, the CLI and the tests.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

# Environment variable names read by BridgeConfig.from_env().
ENV_PREFIX = "LIVE_BRIDGE_"

_TRUE_STRINGS: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS: frozenset[str] = frozenset({"0", "false", "no", "off", ""})


@dataclass(frozen=True)
class BridgeConfig:
    """
    Connection settings for the Live companion bridge.

    Attributes:
        host: Hostname of the bridge. Defaults to "localhost" (loopback).
        port: WebSocket port of the bridge. Defaults to 9001.
        auto_connect: Connect on startup without waiting for the user.
            Defaults to False.
        max_reconnect_attempts: Automatic reconnects scheduled after
            consecutive failures before giving up. Defaults to 5.
        reconnect_delay_ms: Fixed delay before each automatic reconnect.
            Defaults to 3000 ms (not exponential).
        auto_connect_delay_ms: Delay between startup and the automatic
            first connect when ``auto_connect`` is set. Defaults to 2000 ms.

    Example:
        >>> config = BridgeConfig(port=9002, auto_connect=True)
        >>> config.ws_url
        'ws://localhost:9002'
    """

    host: str = "localhost"
    port: int = 9001
    auto_connect: bool = False
    max_reconnect_attempts: int = 5
    reconnect_delay_ms: int = 3000
    auto_connect_delay_ms: int = 2000

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.host:
            raise ValueError("host must be a non-empty string")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if self.max_reconnect_attempts < 0:
            raise ValueError(
                f"max_reconnect_attempts must be non-negative, got {self.max_reconnect_attempts}"
            )
        if self.reconnect_delay_ms < 0:
            raise ValueError(
                f"reconnect_delay_ms must be non-negative, got {self.reconnect_delay_ms}"
            )
        if self.auto_connect_delay_ms < 0:
            raise ValueError(
                f"auto_connect_delay_ms must be non-negative, got {self.auto_connect_delay_ms}"
            )

    @property
    def ws_url(self) -> str:
        """WebSocket URL of the bridge."""
        return f"ws://{self.host}:{self.port}"

    @property
    def reconnect_delay_seconds(self) -> float:
        return self.reconnect_delay_ms / 1000.0

    @property
    def auto_connect_delay_seconds(self) -> float:
        return self.auto_connect_delay_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BridgeConfig:
        """
        Build a config from ``LIVE_BRIDGE_*`` environment variables.

        Unset variables keep their defaults. Entry points call
        ``dotenv.load_dotenv()`` first so a local ``.env`` file is honoured.

        Args:
            environ: Mapping to read instead of ``os.environ`` (tests).

        Raises:
            ValueError: If a variable is set to an unparseable value.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        host = env.get(f"{ENV_PREFIX}HOST")
        if host is not None:
            kwargs["host"] = host.strip()

        for name in ("port", "max_reconnect_attempts", "reconnect_delay_ms", "auto_connect_delay_ms"):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            try:
                kwargs[name] = int(raw.strip())
            except ValueError as exc:
                raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}") from exc

        raw_auto = env.get(f"{ENV_PREFIX}AUTO_CONNECT")
        if raw_auto is not None:
            flag = raw_auto.strip().lower()
            if flag in _TRUE_STRINGS:
                kwargs["auto_connect"] = True
            elif flag in _FALSE_STRINGS:
                kwargs["auto_connect"] = False
            else:
                raise ValueError(f"{ENV_PREFIX}AUTO_CONNECT must be a boolean, got {raw_auto!r}")

        return cls(**kwargs)  # type: ignore[arg-type]


DEFAULT_CONFIG = BridgeConfig()
"""Default configuration: ws://localhost:9001, manual connect, 5 retries every 3 s."""
