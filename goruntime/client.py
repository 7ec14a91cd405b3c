from __future__ import annotations

import logging
import ssl
import threading

import httpx

from goruntime.config import CollectorConfig

logger = logging.getLogger("goruntime.client")

MAX_REDIRECTS = 10


def build_ssl_context(config: CollectorConfig) -> ssl.SSLContext | bool:
    if not (config.tls_ca or config.tls_cert or config.insecure_skip_verify):
        return True
    try:
        context = ssl.create_default_context(cafile=config.tls_ca)
        if config.tls_cert and config.tls_key:
            context.load_cert_chain(certfile=config.tls_cert, keyfile=config.tls_key)
    except (OSError, ssl.SSLError) as exc:
        raise ValueError(f"invalid TLS configuration: {exc}") from exc
    if config.insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def build_client(config: CollectorConfig, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    return httpx.Client(
        timeout=httpx.Timeout(config.timeout_seconds),
        verify=build_ssl_context(config),
        trust_env=True,
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        transport=transport,
    )


class LazyClient:
    """Builds the shared HTTP client on first use and reuses it afterwards."""

    def __init__(self, config: CollectorConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self._transport = transport
        self._lock = threading.Lock()
        self._client: httpx.Client | None = None

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def get(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._client = build_client(self.config, transport=self._transport)
                logger.debug("http client ready timeout=%s", self.config.timeout_seconds)
            return self._client

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
