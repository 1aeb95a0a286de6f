"""Pytest configuration and shared fixtures for restart-orchestrator tests."""

from __future__ import annotations

import pytest
from fakes import FakeClock, FakeRenderAPI, RecordingAlertSink

from restart_orchestrator.config.restart import RestartConfig
from restart_orchestrator.config.services import ServiceTarget
from restart_orchestrator.restart.machine import RestartStateMachine
from restart_orchestrator.restart.poller import StatusPoller


@pytest.fixture
def clock() -> FakeClock:
    """Simulated clock; sleeps return immediately."""
    return FakeClock()


@pytest.fixture
def alerts() -> RecordingAlertSink:
    return RecordingAlertSink()


@pytest.fixture
def render_api() -> FakeRenderAPI:
    """In-memory Render API with default suspend/resume transitions."""
    return FakeRenderAPI()


@pytest.fixture
def restart_config() -> RestartConfig:
    return RestartConfig()


@pytest.fixture
def target() -> ServiceTarget:
    return ServiceTarget(service_id="srv-api", credential="rnd_key_a", display_name="API")


@pytest.fixture
def machine(
    render_api: FakeRenderAPI,
    restart_config: RestartConfig,
    alerts: RecordingAlertSink,
    clock: FakeClock,
) -> RestartStateMachine:
    """State machine wired to the fake API, fake clock and recording alert sink."""
    client = render_api.client()
    poller = StatusPoller(client, poll_interval=restart_config.poll_interval, clock=clock)
    return RestartStateMachine(client, poller, config=restart_config, alerts=alerts, clock=clock)
