"""
Tests for environment-driven configuration and logging setup.
"""

import logging

import pytest

from streamta.config import Config, LogConfig, ParityConfig, get_config
from streamta.utils.logger import ColoredFormatter, Colors, get_logger, setup_logger


class TestConfig:

    def test_defaults(self, fresh_config):
        config = get_config()
        assert config.log == LogConfig(level="INFO", log_dir="logs", log_to_file=False)
        assert config.parity == ParityConfig(tolerance=1e-9, bars=1000, seed=42)

    def test_singleton(self, fresh_config):
        assert get_config() is get_config()
        assert Config() is get_config()

    def test_reads_environment(self, fresh_config, monkeypatch):
        monkeypatch.setenv("STREAMTA_LOG_LEVEL", "debug")
        monkeypatch.setenv("STREAMTA_LOG_TO_FILE", "yes")
        monkeypatch.setenv("STREAMTA_PARITY_TOLERANCE", "1e-6")
        monkeypatch.setenv("STREAMTA_PARITY_BARS", "250")
        config = get_config()
        assert config.log.level == "DEBUG"
        assert config.log.log_to_file is True
        assert config.parity.tolerance == 1e-6
        assert config.parity.bars == 250

    def test_reads_dotenv_file(self, fresh_config, tmp_path):
        (tmp_path / ".env").write_text("STREAMTA_PARITY_SEED=7\n", encoding="utf-8")
        assert get_config().parity.seed == 7

    def test_environment_wins_over_dotenv(self, fresh_config, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("STREAMTA_PARITY_BARS=10\n", encoding="utf-8")
        monkeypatch.setenv("STREAMTA_PARITY_BARS", "20")
        assert get_config().parity.bars == 20

    def test_reload_picks_up_changes(self, fresh_config, monkeypatch):
        assert get_config().parity.bars == 1000
        monkeypatch.setenv("STREAMTA_PARITY_BARS", "77")
        assert get_config().parity.bars == 1000
        assert Config.reload().parity.bars == 77

    @pytest.mark.parametrize("name,value", [
        ("STREAMTA_PARITY_TOLERANCE", "-1"),
        ("STREAMTA_PARITY_TOLERANCE", "abc"),
        ("STREAMTA_PARITY_BARS", "1"),
        ("STREAMTA_PARITY_SEED", "x"),
    ])
    def test_invalid_values(self, fresh_config, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            get_config()


class TestLogger:

    def test_get_logger_namespacing(self):
        assert get_logger().name == "streamta"
        assert get_logger("factory").name == "streamta.factory"
        assert get_logger("streamta.indicators.frame").name == "streamta.indicators.frame"

    def test_setup_logger_console(self, fresh_config, clean_root_logger):
        logger = setup_logger(log_level="debug")
        assert logger is clean_root_logger
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        consoles = [h for h in logger.handlers if type(h) is logging.StreamHandler]
        assert len(consoles) == 1
        assert isinstance(consoles[0].formatter, ColoredFormatter)

    def test_setup_logger_replaces_handlers(self, fresh_config, clean_root_logger):
        setup_logger(log_level="INFO")
        logger = setup_logger(log_level="WARNING")
        consoles = [h for h in logger.handlers if type(h) is logging.StreamHandler]
        assert len(consoles) == 1
        assert logger.level == logging.WARNING

    def test_setup_logger_file(self, fresh_config, clean_root_logger, tmp_path):
        log_dir = tmp_path / "logs"
        logger = setup_logger(log_level="INFO", log_dir=str(log_dir), log_to_file=True)
        get_logger("audit").info("hello file")
        for handler in logger.handlers:
            handler.flush()
        files = list(log_dir.glob("streamta_*.log"))
        assert len(files) == 1
        content = files[0].read_text(encoding="utf-8")
        assert "hello file" in content
        assert "streamta.audit" in content
        assert "\033[" not in content

    def test_level_from_config(self, fresh_config, clean_root_logger, monkeypatch):
        monkeypatch.setenv("STREAMTA_LOG_LEVEL", "ERROR")
        assert setup_logger().level == logging.ERROR

    def test_unknown_level(self, fresh_config, clean_root_logger):
        with pytest.raises(ValueError, match="Unknown log level 'LOUD'"):
            setup_logger(log_level="loud")


class TestColoredFormatter:

    def test_colours_level_and_message(self):
        formatter = ColoredFormatter("%(levelname)s | %(message)s")
        record = logging.LogRecord("streamta", logging.WARNING, __file__, 1, "value=%d", (5,), None)
        text = formatter.format(record)
        assert Colors.YELLOW in text
        assert "value=5" in text

    def test_record_left_unchanged(self):
        formatter = ColoredFormatter("%(levelname)s | %(message)s")
        record = logging.LogRecord("streamta", logging.INFO, __file__, 1, "n=%d", (3,), None)
        formatter.format(record)
        assert record.levelname == "INFO"
        assert record.msg == "n=%d"
        assert record.args == (3,)
