import sys
import warnings

import pytest
from loguru import logger

from gifquant import configs


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
  '''Points every config at an empty directory and forgets anything already loaded.'''
  monkeypatch.setattr(configs.SharedConfig, "base_dir", str(tmp_path))
  monkeypatch.delenv(configs.CONFIG_DIR_ENV, raising=False)
  for config in configs.SharedConfig.all:
    config.cache = None
  yield tmp_path
  for config in configs.SharedConfig.all:
    config.cache = None


@pytest.fixture(autouse=True)
def restore_logger():
  '''Undoes whatever sinks and warning hook `log.init` installed.'''
  showwarning = warnings.showwarning
  yield
  logger.remove()
  logger.add(sys.stderr)
  warnings.showwarning = showwarning
