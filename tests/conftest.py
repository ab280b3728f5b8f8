from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest


TEST_HOST_NAME = "client.example.com"


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    def _write(content: str, name: str = "pam_hbac.conf") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def test_logger() -> logging.Logger:
    # Propagates to the root logger so caplog sees every record.
    logger = logging.getLogger("tests.hbac")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def host_name_lookup() -> Callable[[], str]:
    return lambda: TEST_HOST_NAME
