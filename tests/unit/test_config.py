"""
Unit tests for configuration loading and logging setup.
"""

import logging
from pathlib import Path

import pytest

from crlottery.core.config import (
    DEFAULT_BLOCK_TIME,
    REFUND_GRACE_PERIOD,
    LotteryConfig,
    load_config,
)
from crlottery.utils.logger import get_logger, setup_logging


class TestLotteryConfig:

    def test_defaults(self):
        config = LotteryConfig()
        assert config.refund_grace_period == REFUND_GRACE_PERIOD == 86400
        assert config.default_block_time == DEFAULT_BLOCK_TIME == 12.0
        assert config.block_sample_capacity == 20
        assert (config.min_block_interval, config.max_block_interval) == (0.1, 60.0)

    @pytest.mark.parametrize("overrides", [
        {"refund_grace_period": -1},
        {"block_sample_capacity": 1},
        {"min_block_interval": 60.0},
        {"default_block_time": 0},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ValueError):
            LotteryConfig(**overrides)


class TestLoadConfig:

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("CRLOTTERY_REFUND_GRACE_PERIOD", "60")
        monkeypatch.setenv("CRLOTTERY_DEFAULT_BLOCK_TIME", "2.5")
        config = load_config()
        assert config.refund_grace_period == 60
        assert config.default_block_time == 2.5

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CRLOTTERY_POLL_INTERVAL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("CRLOTTERY_POLL_INTERVAL=15\nCRLOTTERY_DATA_DIR=/tmp/crl\n")
        config = load_config(str(env_file))
        assert config.poll_interval == 15
        assert config.data_dir == Path("/tmp/crl")

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("CRLOTTERY_POLL_INTERVAL=15\n")
        monkeypatch.setenv("CRLOTTERY_POLL_INTERVAL", "30")
        assert load_config(str(env_file)).poll_interval == 30

    def test_bad_value(self, monkeypatch):
        monkeypatch.setenv("CRLOTTERY_BLOCK_SAMPLE_CAPACITY", "many")
        with pytest.raises(ValueError, match="CRLOTTERY_BLOCK_SAMPLE_CAPACITY"):
            load_config()


class TestLogger:

    def test_component_logger_name(self):
        assert get_logger("codec").name == "crlottery.codec"

    def test_root_logger_configured(self):
        get_logger("anything")
        assert logging.getLogger("crlottery").handlers

    def test_level_by_name(self):
        setup_logging("debug")
        assert logging.getLogger("crlottery").level == logging.DEBUG
        setup_logging(logging.INFO)

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging("loud")

    def test_log_file(self, tmp_path):
        setup_logging(logging.INFO, log_dir=str(tmp_path), log_to_file=True)
        get_logger("test").info("written to file")
        for handler in logging.getLogger("crlottery").handlers:
            handler.flush()
        assert "written to file" in (tmp_path / "crlottery.log").read_text()
        setup_logging(logging.INFO)
