"""Tests for the ConnectivityProber module."""

from __future__ import annotations

import time

import httpx
import pytest

from netcache.exceptions import ConfigError
from netcache.models import DEFAULT_PROBE_ENDPOINTS, NetworkStatus, ProbeConfig
from netcache.network import ConnectivityProber

from conftest import trickle_server


TARGET = "https://api.example.com"


def _prober(network, target_url=TARGET, **config) -> ConnectivityProber:
    probe = ProbeConfig(**config) if config else None
    return ConnectivityProber(target_url, probe, transport=network.transport)


# ------------------------------------------------------------------ #
# Internet probing
# ------------------------------------------------------------------ #


class TestInternetReachable:
    @pytest.mark.asyncio
    async def test_offline_when_nothing_answers(self, network) -> None:
        assert await _prober(network).is_internet_reachable() is False
        assert len(network.requests) == len(DEFAULT_PROBE_ENDPOINTS)

    @pytest.mark.asyncio
    async def test_stops_at_first_success(self, network) -> None:
        network.respond(DEFAULT_PROBE_ENDPOINTS[0], json={})
        assert await _prober(network).is_internet_reachable() is True
        assert len(network.requests) == 1

    @pytest.mark.asyncio
    async def test_tries_endpoints_in_order(self, network) -> None:
        network.respond("https://probe-c.test", json={})
        prober = _prober(
            network,
            endpoints=["https://probe-a.test", "https://probe-b.test", "https://probe-c.test"],
        )
        assert await prober.is_internet_reachable() is True
        assert [r.url.host for r in network.requests] == [
            "probe-a.test",
            "probe-b.test",
            "probe-c.test",
        ]

    @pytest.mark.asyncio
    async def test_any_status_counts_as_reachable(self, network) -> None:
        network.respond(DEFAULT_PROBE_ENDPOINTS[0], status=503)
        assert await _prober(network).is_internet_reachable() is True

    @pytest.mark.asyncio
    async def test_timeout_counts_as_unreachable(self, network) -> None:
        for url in DEFAULT_PROBE_ENDPOINTS:
            network.fail(url, httpx.ConnectTimeout("timed out"))
        assert await _prober(network).is_internet_reachable() is False

    @pytest.mark.asyncio
    async def test_empty_endpoint_list_is_offline(self, network) -> None:
        assert await _prober(network, endpoints=[]).is_internet_reachable() is False
        assert network.requests == []


# ------------------------------------------------------------------ #
# Target probing
# ------------------------------------------------------------------ #


class TestTargetReachable:
    @pytest.mark.asyncio
    async def test_configured_target(self, network) -> None:
        network.respond(TARGET, json={"ok": True})
        assert await _prober(network).is_target_reachable() is True

    @pytest.mark.asyncio
    async def test_override_wins_over_configured_target(self, network) -> None:
        network.respond("https://other.example.com", json={})
        assert await _prober(network).is_target_reachable("https://other.example.com") is True
        assert network.calls_to(TARGET) == 0

    @pytest.mark.asyncio
    async def test_error_status_still_reachable(self, network) -> None:
        network.respond(TARGET, status=500)
        assert await _prober(network).is_target_reachable() is True

    @pytest.mark.asyncio
    async def test_refused_connection_unreachable(self, network) -> None:
        network.fail(TARGET)
        assert await _prober(network).is_target_reachable() is False

    @pytest.mark.asyncio
    async def test_malformed_url_unreachable(self, network) -> None:
        assert await _prober(network, target_url="not a url").is_target_reachable() is False

    @pytest.mark.asyncio
    async def test_no_target_raises_config_error(self, network) -> None:
        with pytest.raises(ConfigError, match="No target URL"):
            await _prober(network, target_url=None).is_target_reachable()

    @pytest.mark.asyncio
    async def test_trickling_target_bounded_by_timeout(self, no_proxy_env) -> None:
        async with trickle_server(b'{"up": true}', delay=0.3) as url:
            prober = ConnectivityProber(url, ProbeConfig(target_timeout=0.5))
            started = time.monotonic()
            assert await prober.is_target_reachable() is False
            assert time.monotonic() - started < 2.0

    def test_target_url_property(self) -> None:
        assert ConnectivityProber(TARGET).target_url == TARGET
        assert ConnectivityProber().target_url is None


# ------------------------------------------------------------------ #
# Combined status
# ------------------------------------------------------------------ #


class TestStatus:
    @pytest.mark.asyncio
    async def test_online_and_target_up(self, network) -> None:
        network.go_online(TARGET)
        status = await _prober(network).status()
        assert status == NetworkStatus(is_online=True, can_reach_target=True)

    @pytest.mark.asyncio
    async def test_online_but_target_down(self, network) -> None:
        network.go_online()
        network.fail(TARGET)
        status = await _prober(network).status()
        assert status == NetworkStatus(is_online=True, can_reach_target=False)

    @pytest.mark.asyncio
    async def test_offline_never_probes_target(self, network) -> None:
        network.respond(TARGET, json={})
        status = await _prober(network).status()
        assert status == NetworkStatus(is_online=False, can_reach_target=False)
        assert network.calls_to(TARGET) == 0

    @pytest.mark.asyncio
    async def test_offline_skip_is_logged(self, network, verbose_output, capfd) -> None:
        await _prober(network).status()
        assert "skipping target probe" in capfd.readouterr().err

    @pytest.mark.asyncio
    async def test_offline_without_target_does_not_raise(self, network) -> None:
        status = await _prober(network, target_url=None).status()
        assert status.is_online is False

    @pytest.mark.asyncio
    async def test_online_without_target_reports_unreachable(
        self, network, quiet_output, capfd
    ) -> None:
        network.go_online()
        status = await _prober(network, target_url=None).status()
        assert status == NetworkStatus(is_online=True, can_reach_target=False)
        assert "No target URL configured" in capfd.readouterr().err
        assert len(network.requests) == 1

    @pytest.mark.asyncio
    async def test_status_override_used_without_configured_target(self, network) -> None:
        network.go_online(TARGET)
        status = await _prober(network, target_url=None).status(TARGET)
        assert status.can_reach_target is True

    @pytest.mark.asyncio
    async def test_every_call_probes_again(self, network) -> None:
        network.go_online(TARGET)
        prober = _prober(network)
        assert (await prober.status()).can_reach_target is True

        network.fail(TARGET)
        assert (await prober.status()).can_reach_target is False
        assert network.calls_to(TARGET) == 2
