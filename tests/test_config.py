from pathlib import Path

import pytest
from pydantic import ValidationError

from webdriver_client.capabilities import Chrome, Firefox, Platform
from webdriver_client.config import WebDriverConfig, load_config
from webdriver_client.factory import build_driver


def test_load_config_reads_env_file(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "WEBDRIVER_CLIENT_HOST=grid.local",
                "WEBDRIVER_CLIENT_PORT=5555",
                "WEBDRIVER_CLIENT_HISTORY_LIMIT=10",
                'WEBDRIVER_CLIENT_CAPABILITIES={"browserName": "chrome", "platform": "LINUX"}',
                'WEBDRIVER_CLIENT_REQUEST_HEADERS={"X-Token": "secret"}',
            ]
        )
    )

    config = load_config(env_file=env_path)

    assert config.host == "grid.local"
    assert config.port == 5555
    assert config.history_limit == 10
    assert config.request_headers == {"X-Token": "secret"}
    caps = config.desired_capabilities()
    assert caps.browser == Chrome()
    assert caps.platform is Platform.LINUX


def test_load_config_prioritises_overrides(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "WEBDRIVER_CLIENT_HOST=env-host",
                "WEBDRIVER_CLIENT_PORT=5555",
            ]
        )
    )

    config_path = tmp_path / "webdriver.yaml"
    config_path.write_text(
        "\n".join(
            [
                "host: file-host",
                "base_path: /",
                "capabilities:",
                "  browserName: firefox",
                "  acceptSslCerts: true",
            ]
        )
    )

    config = load_config(config_path, env_file=env_path, port=4445)

    assert config.host == "file-host"
    assert config.port == 4445
    assert config.base_path == "/"
    caps = config.desired_capabilities()
    assert caps.browser == Firefox()
    assert caps.accept_ssl_certs is True


def test_defaults_build_a_local_driver() -> None:
    config = WebDriverConfig()

    assert config.desired_capabilities().platform is Platform.ANY
    with build_driver(config) as wd:
        assert wd.session.host == "127.0.0.1"
        assert wd.session.port == 4444
        assert wd.session.base_path == "/wd/hub"
        assert wd.session.session_id is None


def test_unknown_capabilities_fail_validation() -> None:
    with pytest.raises(ValidationError, match="safari"):
        WebDriverConfig(capabilities={"browserName": "safari"})
    with pytest.raises(ValidationError):
        load_config(capabilities={"platform": "atari"})


def test_overrides_merge_into_file_capabilities(tmp_path: Path) -> None:
    config_path = tmp_path / "webdriver.yaml"
    config_path.write_text("capabilities:\n  browserName: firefox\n  acceptSslCerts: true\n")

    config = load_config(config_path, capabilities={"browserName": "chrome"})

    caps = config.desired_capabilities()
    assert caps.browser == Chrome()
    assert caps.accept_ssl_certs is True
