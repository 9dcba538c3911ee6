import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from script_runner.config import CDP_ENDPOINT_URL_DEFAULT, DEFAULT_PORT, ServiceConfig
from script_runner.errors import ConfigError


class TestServiceConfigDefaults:
    def test_empty_environment(self):
        config = ServiceConfig.from_env({})
        assert config.port == DEFAULT_PORT == 8080
        assert config.host == "127.0.0.1"
        assert config.use_local_playwright is False
        assert config.mode == "cdp"
        assert config.cdp_endpoint_url == CDP_ENDPOINT_URL_DEFAULT == "http://localhost:9222"
        assert config.headless is True
        assert config.script_timeout is None

    def test_empty_values_fall_back(self):
        config = ServiceConfig.from_env({"PORT": "", "CDP_ENDPOINT_URL": "", "HOST": ""})
        assert config.port == 8080
        assert config.cdp_endpoint_url == CDP_ENDPOINT_URL_DEFAULT
        assert config.host == "127.0.0.1"


class TestServiceConfigFromEnv:
    def test_local_mode(self):
        config = ServiceConfig.from_env({"USE_LOCAL_PLAYWRIGHT": "true"})
        assert config.use_local_playwright is True
        assert config.mode == "local"

    @pytest.mark.parametrize("value", ["TRUE", "1", "yes", "false", ""])
    def test_local_mode_requires_exact_true(self, value):
        config = ServiceConfig.from_env({"USE_LOCAL_PLAYWRIGHT": value})
        assert config.use_local_playwright is False

    def test_values(self):
        config = ServiceConfig.from_env({
            "PORT": "9000",
            "HOST": "0.0.0.0",
            "CDP_ENDPOINT_URL": "http://chrome:9222",
            "HEADLESS": "false",
            "SCRIPT_TIMEOUT_SECONDS": "12.5",
        })
        assert config.port == 9000
        assert config.host == "0.0.0.0"
        assert config.cdp_endpoint_url == "http://chrome:9222"
        assert config.headless is False
        assert config.script_timeout == 12.5

    def test_zero_timeout_is_unbounded(self):
        config = ServiceConfig.from_env({"SCRIPT_TIMEOUT_SECONDS": "0"})
        assert config.script_timeout is None

    def test_invalid_port(self):
        with pytest.raises(ConfigError, match="PORT"):
            ServiceConfig.from_env({"PORT": "eighty"})

    def test_invalid_timeout(self):
        with pytest.raises(ConfigError, match="SCRIPT_TIMEOUT_SECONDS"):
            ServiceConfig.from_env({"SCRIPT_TIMEOUT_SECONDS": "soon"})

    def test_negative_timeout(self):
        with pytest.raises(ConfigError):
            ServiceConfig.from_env({"SCRIPT_TIMEOUT_SECONDS": "-1"})


class TestServiceConfigToDict:
    def test_cdp(self):
        d = ServiceConfig().to_dict()
        assert d["mode"] == "cdp"
        assert d["cdp_endpoint"] == CDP_ENDPOINT_URL_DEFAULT

    def test_local_hides_endpoint(self):
        d = ServiceConfig(use_local_playwright=True).to_dict()
        assert d["mode"] == "local"
        assert d["cdp_endpoint"] is None
