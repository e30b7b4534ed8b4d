"""
Client configuration.

Plain frozen dataclass with defaults; ``from_env`` reads the same fields
from environment variables:

    DIEM_JSON_RPC_URL      endpoint URL (required)
    DIEM_CHAIN_ID          expected chain id (required)
    DIEM_RETRY_DELAY       seconds between status polls (default 0.5)
    DIEM_REQUEST_TIMEOUT   per-request HTTP timeout in seconds (default 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_RETRY_DELAY = 0.5
DEFAULT_REQUEST_TIMEOUT = 30.0

ENV_URL = "DIEM_JSON_RPC_URL"
ENV_CHAIN_ID = "DIEM_CHAIN_ID"
ENV_RETRY_DELAY = "DIEM_RETRY_DELAY"
ENV_REQUEST_TIMEOUT = "DIEM_REQUEST_TIMEOUT"


@dataclass(frozen=True)
class ClientConfig:
    url: str
    chain_id: int
    retry_delay: float = DEFAULT_RETRY_DELAY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url must be non-empty")
        if not 0 <= self.chain_id <= 255:
            raise ValueError(f"chain_id must be in 0..255, got: {self.chain_id}")
        if self.retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got: {self.retry_delay}")
        if self.request_timeout <= 0:
            raise ValueError(
                f"request_timeout must be > 0, got: {self.request_timeout}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a config from environment variables.

        Raises:
            ValueError: A required variable is missing or a value is invalid.
        """
        env = os.environ if environ is None else environ

        url = env.get(ENV_URL)
        if not url:
            raise ValueError(f"{ENV_URL} is not set")
        raw_chain_id = env.get(ENV_CHAIN_ID)
        if raw_chain_id is None:
            raise ValueError(f"{ENV_CHAIN_ID} is not set")

        return cls(
            url=url,
            chain_id=_parse(int, ENV_CHAIN_ID, raw_chain_id),
            retry_delay=_parse(
                float, ENV_RETRY_DELAY, env.get(ENV_RETRY_DELAY, str(DEFAULT_RETRY_DELAY))
            ),
            request_timeout=_parse(
                float,
                ENV_REQUEST_TIMEOUT,
                env.get(ENV_REQUEST_TIMEOUT, str(DEFAULT_REQUEST_TIMEOUT)),
            ),
        )


def _parse(kind: type, name: str, raw: str):  # type: ignore[no-untyped-def]
    try:
        return kind(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a valid {kind.__name__}, got: {raw!r}") from e
