"""Tests for configuration loading and overrides."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from restart_orchestrator.config.app import (
    OrchestratorConfig,
    apply_cli_overrides,
    apply_env_overrides,
    coerce_services,
    load_config,
    load_yaml,
)
from restart_orchestrator.config.restart import RestartConfig
from restart_orchestrator.config.services import ServiceTarget, parse_services_json
from restart_orchestrator.errors import ConfigError

pytestmark = pytest.mark.unit

SERVICES_JSON = json.dumps(
    [
        {"apiKey": "rnd_a", "serviceId": "srv-a", "name": "API"},
        {"apiKey": "rnd_b", "serviceId": "srv-b"},
    ]
)


@pytest.fixture
def missing_file(tmp_path: Path) -> str:
    return str(tmp_path / "absent.yaml")


class TestDefaults:
    def test_restart_defaults(self) -> None:
        config = RestartConfig()
        assert config.suspend_timeout == 60.0
        assert config.resume_timeout == 180.0
        assert config.poll_interval == 5.0
        assert config.max_attempts == 3
        assert config.backoff_delay == 2.0
        assert config.settle_delay == 2.0
        assert "suspended" in config.suspended_statuses
        assert "live" in config.resumed_statuses

    def test_orchestrator_defaults(self, missing_file: str) -> None:
        config = load_config(missing_file, env={})
        assert config.port == 3000
        assert config.services == []
        assert config.webhook.secret is None
        assert config.webhook.secret_header == "x-shared-secret"
        assert config.alerts.webhook_url is None
        assert config.render.base_url == "https://api.render.com"

    def test_status_sets_are_normalized(self) -> None:
        config = RestartConfig(resumed_statuses=[" LIVE ", "Running"])
        assert config.resumed_statuses == ["live", "running"]

    def test_empty_status_set_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RestartConfig(suspended_statuses=["  "])

    @pytest.mark.parametrize("attempts", [0, 21])
    def test_attempt_bounds(self, attempts: int) -> None:
        with pytest.raises(ValidationError):
            RestartConfig(max_attempts=attempts)

    def test_config_is_frozen(self) -> None:
        config = RestartConfig()
        with pytest.raises(ValidationError):
            config.max_attempts = 5  # type: ignore[misc]


class TestServices:
    def test_parse_accepts_camel_case_keys(self) -> None:
        targets = parse_services_json(SERVICES_JSON)
        assert [t.service_id for t in targets] == ["srv-a", "srv-b"]
        assert targets[0].credential == "rnd_a"
        assert targets[0].label == "API"
        assert targets[1].label == "srv-b"

    @pytest.mark.parametrize(
        "raw",
        ["not json", '{"serviceId": "srv-a"}', '[{"serviceId": "srv-a"}]', '[{"apiKey": " ", "serviceId": "x"}]'],
    )
    def test_malformed_list_becomes_empty(self, raw: str) -> None:
        assert parse_services_json(raw) == []

    def test_blank_string_is_empty_list(self) -> None:
        assert parse_services_json("  ") == []

    def test_credential_is_not_in_repr(self) -> None:
        target = ServiceTarget(service_id="srv-a", credential="rnd_topsecret")
        assert "rnd_topsecret" not in repr(target)

    def test_coerce_services_from_yaml_list(self) -> None:
        raw = [{"service_id": "srv-a", "credential": "k", "display_name": "A"}]
        assert coerce_services(raw) == [
            {"service_id": "srv-a", "credential": "k", "display_name": "A"}
        ]

    def test_coerce_services_rejects_mapping(self) -> None:
        assert coerce_services({"srv-a": "k"}) == []


class TestYaml:
    def test_load_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "port: 8080\n"
            "webhook:\n"
            "  secret: from-yaml\n"
            "restart:\n"
            "  max_attempts: 4\n"
            "services:\n"
            "  - serviceId: srv-a\n"
            "    apiKey: rnd_a\n"
        )

        config = load_config(str(path), env={})

        assert config.port == 8080
        assert config.webhook.secret == "from-yaml"
        assert config.restart.max_attempts == 4
        assert config.services[0].service_id == "srv-a"

    def test_missing_file_is_empty(self, missing_file: str) -> None:
        assert load_yaml(missing_file) == {}

    def test_empty_file_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_yaml(str(path)) == {}

    def test_bad_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("port = 1")
        with pytest.raises(ConfigError, match="extension"):
            load_yaml(str(path))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("port: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_yaml(str(path))

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_yaml(str(path))

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"port": 9000}))
        assert load_yaml(str(path)) == {"port": 9000}


class TestEnvironment:
    def test_millisecond_variables_become_seconds(self) -> None:
        env = {
            "SUSPEND_TIMEOUT_MS": "30000",
            "START_TIMEOUT_MS": "240000",
            "STATUS_POLL_INTERVAL_MS": "2500",
            "BACKOFF_DELAY_MS": "500",
            "SETTLE_DELAY_MS": "0",
            "WATCHDOG_INTERVAL_MS": "60000",
            "WATCHDOG_COOLDOWN_MS": "120000",
            "ACTION_RETRY": "5",
        }

        result = apply_env_overrides({}, env)

        assert result["restart"] == {
            "suspend_timeout": 30.0,
            "resume_timeout": 240.0,
            "poll_interval": 2.5,
            "backoff_delay": 0.5,
            "settle_delay": 0.0,
            "max_attempts": 5,
        }
        assert result["watchdog"] == {"interval": 60.0, "cooldown": 120.0}

    def test_services_and_secrets(self, missing_file: str) -> None:
        env = {
            "SERVICES_JSON": SERVICES_JSON,
            "UPTIMEROBOT_SECRET": "legacy-secret",
            "ALERT_WEBHOOK": "https://discord.example/hook",
            "DEBUG": "true",
            "PORT": "4000",
        }

        config = load_config(missing_file, env=env)

        assert len(config.services) == 2
        assert config.webhook.secret == "legacy-secret"
        assert config.alerts.webhook_url == "https://discord.example/hook"
        assert config.debug is True
        assert config.port == 4000

    def test_reads_process_environment_by_default(
        self, monkeypatch: pytest.MonkeyPatch, missing_file: str
    ) -> None:
        monkeypatch.setenv("START_TIMEOUT_MS", "90000")
        monkeypatch.setenv("WEBHOOK_SECRET", "from-env")

        config = load_config(missing_file)

        assert config.restart.resume_timeout == 90.0
        assert config.webhook.secret == "from-env"

    def test_webhook_secret_wins_over_legacy_name(self) -> None:
        env = {"WEBHOOK_SECRET": "new", "UPTIMEROBOT_SECRET": "old"}
        assert apply_env_overrides({}, env)["webhook"]["secret"] == "new"

    def test_malformed_services_json_does_not_abort(self, missing_file: str) -> None:
        config = load_config(missing_file, env={"SERVICES_JSON": "[{broken"})
        assert config.services == []

    def test_env_overrides_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("restart:\n  suspend_timeout: 10\n  max_attempts: 2\n")

        config = load_config(str(path), env={"SUSPEND_TIMEOUT_MS": "45000"})

        assert config.restart.suspend_timeout == 45.0
        assert config.restart.max_attempts == 2

    @pytest.mark.parametrize("name", ["SUSPEND_TIMEOUT_MS", "ACTION_RETRY", "PORT"])
    def test_non_numeric_values_raise(self, name: str) -> None:
        with pytest.raises(ConfigError, match=name):
            apply_env_overrides({}, {name: "soon"})

    def test_out_of_range_value_is_config_error(self, missing_file: str) -> None:
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(missing_file, env={"ACTION_RETRY": "0"})

    def test_blank_values_are_ignored(self) -> None:
        assert apply_env_overrides({}, {"SUSPEND_TIMEOUT_MS": " ", "PORT": ""}) == {}

    def test_watch_targets(self, missing_file: str) -> None:
        env = {
            "WATCH_1_API_KEY": "rnd_1",
            "WATCH_1_SERVICE_ID": "srv-1",
            "WATCH_1_HEALTH_URL": "https://one.example.com/health",
            "WATCH_1_NAME": "One",
            "WATCH_2_API_KEY": "rnd_2",
            "WATCH_2_SERVICE_ID": "srv-2",
            "WATCH_2_HEALTH_URL": "https://two.example.com/health",
            # gap at 3 stops the scan
            "WATCH_4_SERVICE_ID": "srv-4",
        }

        config = load_config(missing_file, env=env)

        targets = config.watchdog.targets
        assert [t.service_id for t in targets] == ["srv-1", "srv-2"]
        assert targets[0].label == "One"
        assert targets[1].health_url == "https://two.example.com/health"

    def test_incomplete_watch_target_raises(self) -> None:
        with pytest.raises(ConfigError, match="WATCH_1_"):
            apply_env_overrides({}, {"WATCH_1_SERVICE_ID": "srv-1", "WATCH_1_API_KEY": "k"})


class TestCliOverrides:
    def test_none_values_are_skipped(self) -> None:
        result = apply_cli_overrides({"port": 3000}, {"port": None, "host": "127.0.0.1"})
        assert result == {"port": 3000, "host": "127.0.0.1"}

    def test_dotted_keys(self) -> None:
        result = apply_cli_overrides({}, {"restart.max_attempts": 7})
        assert result == {"restart": {"max_attempts": 7}}

    def test_cli_wins_over_env(self, missing_file: str) -> None:
        config = load_config(missing_file, cli_overrides={"port": 5000}, env={"PORT": "4000"})
        assert config.port == 5000

    def test_invalid_port(self) -> None:
        with pytest.raises(ValidationError):
            OrchestratorConfig(port=70000)
