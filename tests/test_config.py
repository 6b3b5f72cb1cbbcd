from app.config import LOGSTASH_URL, SERVICE_NAME, get_settings
from app.observability.log_shipper import ShipperConfig


def test_defaults_when_environment_unset() -> None:
    settings = get_settings()
    assert settings.environment == "production"
    assert settings.server_ip == "127.0.0.1"
    assert settings.port == 8080
    assert settings.simulate_latency is False  # set by the test fixture
    assert not settings.is_development


def test_empty_environment_falls_back_to_production(monkeypatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "")
    get_settings.cache_clear()
    assert get_settings().environment == "production"


def test_shipper_config_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("SERVER_IP", "203.0.113.9")
    get_settings.cache_clear()
    assert get_settings().is_development

    config = ShipperConfig.from_settings(get_settings())

    assert config.endpoint == LOGSTASH_URL
    assert config.service_name == SERVICE_NAME
    assert config.environment == "development"
    assert config.server_ip == "203.0.113.9"
    assert config.hostname
    assert config.timeout == 5.0
    assert config.max_idle_connections == 100
    assert config.idle_timeout == 90.0
