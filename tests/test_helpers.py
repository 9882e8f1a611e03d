"""Tests for bytetracker.utils.helpers."""

import logging

from bytetracker.utils import load_config, save_config, setup_logging


def test_save_and_load_config(tmp_path):
    config = {'tracker': {'max_retention_time': 10, 'mot20': False}}
    path = tmp_path / 'nested' / 'config.yaml'

    save_config(config, str(path))

    assert load_config(str(path)) == config


def test_setup_logging(tmp_path):
    logger = setup_logging(str(tmp_path / 'logs'), name='bytetracker_test_helpers')

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2
    assert any(p.suffix == '.log' for p in (tmp_path / 'logs').iterdir())

    # Second call does not duplicate handlers
    again = setup_logging(str(tmp_path / 'logs'), name='bytetracker_test_helpers')
    assert again is logger
    assert len(again.handlers) == 2
