from typing import List, Optional, Tuple

import pytest
import yaml
from pydantic import BaseModel, ValidationError

from gifquant import configs, misc


class Model(BaseModel):
  colours: int = 256
  name: str = "default"


def write(path, data) -> None:
  with open(path, "w") as f:
    yaml.dump(data, f)


def test_missing_file_gives_defaults(config_dir):
  config = configs.SharedConfig("missing", Model)
  assert config() == Model()
  assert config.file == str(config_dir / "missing.yaml")


def test_load_from_yaml(config_dir):
  write(config_dir / "test.yaml", {"colours": 16})
  config = configs.SharedConfig("test", Model)
  assert config().colours == 16
  assert config().name == "default"


def test_lazy_reload(config_dir):
  write(config_dir / "test.yaml", {"colours": 16})
  config = configs.SharedConfig("test", Model)
  assert config().colours == 16
  write(config_dir / "test.yaml", {"colours": 32})
  assert config().colours == 16
  config.reload()
  assert config().colours == 32


def test_onload_handlers(config_dir):
  calls: List[Tuple[Optional[int], int]] = []
  config = configs.SharedConfig("test", Model, "eager")

  @config.onload()
  def handler(old: Optional[Model], cur: Model) -> None:
    calls.append((old.colours if old else None, cur.colours))

  config()
  write(config_dir / "test.yaml", {"colours": 8})
  config.reload()
  assert calls == [(None, 256), (256, 8)]


def test_not_reloadable():
  config = configs.SharedConfig("test", Model, False)
  config()
  with pytest.raises(ValueError):
    config.reload()


def test_quantize_config_defaults():
  config = misc.CONFIG()
  assert config.colours == 256
  assert config.caption_scale == 1.2


def test_quantize_config_is_validated(config_dir):
  write(config_dir / "quantize.yaml", {"colours": 0})
  with pytest.raises(ValidationError):
    misc.CONFIG()


def test_directory_from_environment(tmp_path, monkeypatch):
  other = tmp_path / "elsewhere"
  other.mkdir()
  write(other / "test.yaml", {"name": "env"})
  monkeypatch.setenv(configs.CONFIG_DIR_ENV, str(other))
  assert configs.SharedConfig("test", Model)().name == "env"


def test_reload_before_first_use_reads_nothing(config_dir):
  calls: List[Model] = []
  config = configs.SharedConfig("test", Model, "eager")
  config.onload()(lambda old, cur: calls.append(cur))
  config.reload()
  assert calls == []
  assert config().colours == 256
  assert len(calls) == 1


def test_invalid_file_is_an_error(config_dir):
  write(config_dir / "test.yaml", {"colours": "many"})
  with pytest.raises(ValidationError):
    configs.SharedConfig("test", Model)()
