from __future__ import annotations

import ssl
from pathlib import Path

import pytest

from goruntime.client import LazyClient, build_client, build_ssl_context
from goruntime.config import CollectorConfig


def test_default_verification_without_tls_options() -> None:
    assert build_ssl_context(CollectorConfig()) is True


def test_insecure_skip_verify_disables_checks() -> None:
    context = build_ssl_context(CollectorConfig(insecure_skip_verify=True))
    assert isinstance(context, ssl.SSLContext)
    assert context.verify_mode == ssl.CERT_NONE
    assert context.check_hostname is False


def test_missing_ca_file_is_a_config_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        build_ssl_context(CollectorConfig(tls_ca=str(tmp_path / "missing.pem")))


def test_client_uses_configured_timeout() -> None:
    client = build_client(CollectorConfig(timeout_seconds=2.5))
    try:
        assert client.timeout.read == 2.5
        assert client.timeout.connect == 2.5
    finally:
        client.close()


def test_lazy_client_reuses_instance_until_closed() -> None:
    lazy = LazyClient(CollectorConfig())
    assert not lazy.initialized
    first = lazy.get()
    assert lazy.get() is first
    lazy.close()
    assert not lazy.initialized
    assert first.is_closed
    second = lazy.get()
    assert second is not first
    lazy.close()


def test_lazy_client_retries_after_setup_failure(tmp_path: Path) -> None:
    lazy = LazyClient(CollectorConfig(tls_ca=str(tmp_path / "missing.pem")))
    with pytest.raises(ValueError):
        lazy.get()
    assert not lazy.initialized
