import linecache
import sys
import warnings
from datetime import time, timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional, TextIO, Tuple, Type, Union

from loguru import logger
from pydantic import BaseModel, Field

from .. import configs

if TYPE_CHECKING:
  from loguru import Record

__all__ = ["CONFIG", "Config", "FileTarget", "SpecialTarget", "Target", "init", "showwarning"]

Level = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class Target(BaseModel):
  level: Union[Level, int] = "INFO"
  # Collapses gifquant.quantize.quantizer_wu and friends into "gifquant", None keeps full names.
  fold_prefix: Optional[str] = "gifquant"
  format: str = "<g>{time:HH:mm:ss}</g> <lvl>{level:8}</lvl> <c>{name}</c>: {message}"
  colorize: Optional[bool] = None
  backtrace: bool = True
  diagnose: bool = False


class FileTarget(Target):
  file: str
  rotation: Union[str, int, time, timedelta, None] = None
  retention: Union[str, int, timedelta, None] = None
  compression: Union[str, None] = None
  encoding: str = "utf8"


class SpecialTarget(Target):
  type: Literal["stdout", "stderr", "syslog"] = "stderr"


class Config(BaseModel):
  sinks: List[Union[FileTarget, SpecialTarget]] = Field(default_factory=lambda: [SpecialTarget()])
  warnings_as_log: bool = True


CONFIG = configs.SharedConfig("log", Config, "eager")
showwarning_orig = warnings.showwarning


def _make_filter(sink: Target):
  level = logger.level(sink.level.upper()).no if isinstance(sink.level, str) else sink.level
  prefix = sink.fold_prefix

  def filter(record: "Record") -> bool:
    if prefix and (record["name"] or "").startswith(prefix + "."):
      record["name"] = prefix
    return record["level"].no >= level
  return filter


def _open_sink(sink: Union[FileTarget, SpecialTarget]) -> Tuple[Any, Dict[str, Any]]:
  if isinstance(sink, FileTarget):
    return sink.file, {
      "rotation": sink.rotation,
      "retention": sink.retention,
      "compression": sink.compression,
      "encoding": sink.encoding,
    }
  if sink.type == "stdout":
    return sys.__stdout__, {}
  if sink.type == "stderr":
    return sys.__stderr__, {}
  from .syslog import syslog_handler
  return syslog_handler, {}


@CONFIG.onload()
def config_onload(_: Optional[Config], cur: Config) -> None:
  warnings.showwarning = showwarning if cur.warnings_as_log else showwarning_orig
  logger.remove()
  for sink in cur.sinks:
    real_sink, kw = _open_sink(sink)
    logger.add(
      real_sink,
      filter=_make_filter(sink),
      format=sink.format,
      colorize=sink.colorize,
      diagnose=sink.diagnose,
      backtrace=sink.backtrace,
      **kw
    )


def init() -> None:
  '''Installs the sinks from configs/log.yaml, replacing loguru's default one.'''
  CONFIG()


def showwarning(
  message: Union[Warning, str], category: Type[Warning], filename: str, lineno: int,
  file: Optional[TextIO] = None, line: Optional[str] = None,
) -> None:
  '''Drop-in for `warnings.showwarning` that writes to the log instead of stderr.'''
  if line is None:
    line = linecache.getline(filename, lineno)
  line = line.strip()
  log = logger.opt(colors=True, depth=2)  # no f-string, loguru would parse the markup in it
  log.warning("<b><y>{}</y>: {}</b>", category.__name__, str(message).strip())
  log.warning("  <g>{}</g>:<y>{}</y>", filename, lineno)
  if line:
    log.warning("    {}", line)
