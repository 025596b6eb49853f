import os
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, ClassVar, Generic, List, Literal, Optional, Type, TypeVar

import yaml
from loguru import logger
from pydantic import BaseModel, ValidationError

try:
  from yaml import CSafeLoader as SafeLoader
except ImportError:
  logger.info("libyaml is not available, using the pure Python YAML parser")
  from yaml import SafeLoader

__all__ = ["CONFIG_DIR_ENV", "CacheItem", "LoadHandler", "Reloadable", "SharedConfig"]

CONFIG_DIR_ENV = "GIFQUANT_CONFIG_DIR"

TModel = TypeVar("TModel", bound=BaseModel)
LoadHandler = Callable[[Optional[TModel], TModel], None]
Reloadable = Literal[False, "eager", "lazy"]


@dataclass
class CacheItem(Generic[TModel]):
  item: TModel
  stale: bool = False


class SharedConfig(Generic[TModel]):
  '''
  A pydantic model read from `<name>.yaml` on first use. Files live in $GIFQUANT_CONFIG_DIR when
  it's set, otherwise in `base_dir`. A missing file gives the model's defaults.

  reloadable:
    "eager": `reload` reads the file again immediately and runs the onload handlers.
    "lazy": `reload` only marks the cache stale, the file is read on next use.
    False: `reload` raises ValueError.
  '''
  base_dir: ClassVar[str] = "configs"
  all: ClassVar[List["SharedConfig[Any]"]] = []

  def __init__(self, name: str, model: Type[TModel], reloadable: Reloadable = "lazy") -> None:
    self.name = name
    self.model = model
    self.reloadable: Reloadable = reloadable
    self.cache: Optional[CacheItem[TModel]] = None
    self.handlers: List[LoadHandler[TModel]] = []
    self.lock = Lock()
    self.all.append(self)

  @property
  def file(self) -> str:
    return os.path.join(os.environ.get(CONFIG_DIR_ENV) or self.base_dir, f"{self.name}.yaml")

  def __call__(self) -> TModel:
    if self.cache is None or self.cache.stale:
      with self.lock:  # frames may be quantized from worker threads
        if self.cache is None or self.cache.stale:
          return self.load()
    return self.cache.item

  def load(self) -> TModel:
    file = self.file
    if os.path.exists(file):
      logger.info(f"Loading config file: {file}")
      with open(file) as f:
        data = yaml.load(f, SafeLoader) or {}
      try:
        new_config = self.model.model_validate(data)
      except ValidationError:
        logger.error(f"Invalid config file: {file}")
        raise
    else:
      logger.info(f"Config file doesn't exist, using defaults: {file}")
      new_config = self.model()
    old_config = None if self.cache is None else self.cache.item
    self.cache = CacheItem(new_config)
    for handler in self.handlers:
      handler(old_config, new_config)
    return new_config

  def onload(self) -> Callable[[LoadHandler[TModel]], LoadHandler[TModel]]:
    def decorator(handler: LoadHandler[TModel]) -> LoadHandler[TModel]:
      self.handlers.append(handler)
      return handler
    return decorator

  def reload(self) -> None:
    if not self.reloadable:
      raise ValueError(f"{self.name} config isn't reloadable")
    if self.cache is None:
      return
    if self.reloadable == "eager":
      self.load()
    else:
      self.cache.stale = True
