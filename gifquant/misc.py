from typing import Literal, Union

from pydantic import BaseModel, Field

from .configs import SharedConfig

__all__ = ["CONFIG", "Config", "Disposal"]

Disposal = Literal[0, 1, 2, 3]


class Config(BaseModel):
  colours: int = Field(256, ge=1, le=256)
  caption_scale: float = Field(1.2, ge=1.0)
  caption_background: Union[str, int] = "#ffffff"
  caption_foreground: Union[str, int] = "#000000"
  caption_margin: int = Field(8, ge=0)
  loop: int = 0
  disposal: Disposal = 0


CONFIG = SharedConfig("quantize", Config)
