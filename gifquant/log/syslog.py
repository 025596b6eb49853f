# syslog is unavailable on Windows, so this is imported only when a syslog sink is configured
import syslog
from typing import TYPE_CHECKING

if TYPE_CHECKING:
  from loguru import Message

__all__ = ["priority", "syslog_handler"]


def priority(levelno: int) -> int:
  if levelno >= 50:  # CRITICAL
    return syslog.LOG_CRIT
  elif levelno >= 40:  # ERROR
    return syslog.LOG_ERR
  elif levelno >= 30:  # WARNING
    return syslog.LOG_WARNING
  elif levelno >= 25:  # SUCCESS
    return syslog.LOG_NOTICE
  elif levelno >= 20:  # INFO
    return syslog.LOG_INFO
  return syslog.LOG_DEBUG  # DEBUG, TRACE


def syslog_handler(message: "Message") -> None:
  syslog.syslog(priority(message.record["level"].no), message)
