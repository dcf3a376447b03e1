import pytest
from pydantic import ValidationError

from src.utils.config_loader import CheckoutConfig, load_checkout_config


def test_defaults_match_checkout_contract():
    config = CheckoutConfig()
    assert config.poll_interval_seconds == 2.0
    assert config.api_base_url == ""
    assert config.use_real_gateway() is False


def test_load_from_yaml(tmp_path):
    path = tmp_path / "checkout_config.yml"
    path.write_text(
        "api_base_url: https://pay.example.test/\npoll_interval_seconds: 3\nintegrations_mode: REAL\n",
        encoding="utf-8",
    )

    config = load_checkout_config(path)

    assert config.api_base_url == "https://pay.example.test"
    assert config.poll_interval_seconds == 3.0
    assert config.integrations_mode == "real"
    assert config.use_real_gateway() is True


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "checkout_config.yml"
    path.write_text("api_base_url: https://from-file.test\n", encoding="utf-8")
    monkeypatch.setenv("CHECKOUT_API_BASE_URL", "http://localhost:8000")
    monkeypatch.setenv("CHECKOUT_POLL_INTERVAL_SECONDS", "0.5")

    config = load_checkout_config(path)

    assert config.api_base_url == "http://localhost:8000"
    assert config.poll_interval_seconds == 0.5
    assert config.use_real_gateway() is True


def test_mock_mode_wins_over_base_url():
    config = CheckoutConfig(api_base_url="http://localhost:8000", integrations_mode="mock")
    assert config.use_real_gateway() is False


def test_missing_explicit_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_checkout_config(tmp_path / "nope.yml")


@pytest.mark.parametrize("data", [{"poll_interval_seconds": 0}, {"integrations_mode": "live"}])
def test_invalid_config_is_rejected(data):
    with pytest.raises(ValidationError):
        CheckoutConfig(**data)
