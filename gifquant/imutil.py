from io import BytesIO
from typing import Generator, Iterable, List, Optional, Sequence, Union

import numpy as np
from loguru import logger
from PIL import Image, ImageDraw, ImageFont, ImageSequence

from . import colorutil, misc
from .quantize import compress

__all__ = [
  "caption", "frames", "palette_from_frames", "pixels", "quantize", "to_gif",
]

DEFAULT_DURATION = 100


def frames(im: Image.Image) -> Generator[Image.Image, None, None]:
  if not getattr(im, "is_animated", False):
    yield im
    return
  yield from ImageSequence.Iterator(im)


def pixels(im: Image.Image) -> np.ndarray:
  '''(h, w, 3) uint8 array of an image, with transparency dropped.'''
  return np.asarray(im.convert("RGB"), np.uint8)


def palette_from_frames(ims: Iterable[Image.Image]) -> np.ndarray:
  '''Every pixel of every frame, as an (n, 3) array.'''
  arrays = [pixels(im).reshape(-1, 3) for im in ims]
  if not arrays:
    return np.empty((0, 3), np.uint8)
  return np.concatenate(arrays)


def quantize(ims: Sequence[Image.Image], colours: Optional[int] = None) -> List[Image.Image]:
  '''
  Converts frames to mode "P", sharing one palette built from all of them. Durations are kept.
  '''
  if colours is None:
    colours = misc.CONFIG().colours
  palette, lookup = compress(palette_from_frames(ims), colours)
  logger.debug(f"Quantized {len(ims)} frames into {len(palette)} colors")
  flat = [channel for color in palette for channel in color]
  result: List[Image.Image] = []
  for im in ims:
    indices = lookup.remap(pixels(im))
    out = Image.frombytes("P", im.size, indices.tobytes())
    out.putpalette(flat)
    if "duration" in im.info:
      out.info["duration"] = im.info["duration"]
    result.append(out)
  return result


def _fit_font(
  draw: ImageDraw.ImageDraw, text: str, width: int, height: int,
) -> Union[ImageFont.ImageFont, ImageFont.FreeTypeFont]:
  size = max(height * 3 // 5, 1)
  while True:
    font = ImageFont.load_default(size)
    left, _, right, _ = draw.textbbox((0, 0), text, font)
    if right - left <= width or size <= 1 or not isinstance(font, ImageFont.FreeTypeFont):
      return font
    size -= 1


def caption(im: Image.Image, text: str) -> List[Image.Image]:
  '''
  Adds a band above every frame, `caption_scale` times the original height in total, and writes
  the text centered in it.
  '''
  config = misc.CONFIG()
  background = colorutil.to_rgb(config.caption_background)
  foreground = colorutil.to_rgb(config.caption_foreground)
  band = max(round(im.height * config.caption_scale) - im.height, 1)
  width = im.width
  header = Image.new("RGB", (width, band), background)
  draw = ImageDraw.Draw(header)
  if text:
    font = _fit_font(draw, text, width - 2 * config.caption_margin, band)
    left, top, right, bottom = draw.textbbox((0, 0), text, font)
    x = (width - (right - left)) / 2 - left
    y = (band - (bottom - top)) / 2 - top
    draw.text((x, y), text, foreground, font)
  logger.debug(f"Captioning {width}x{im.height} image with a {band}px band")
  result: List[Image.Image] = []
  for frame in frames(im):
    out = Image.new("RGB", (width, im.height + band), background)
    out.paste(header, (0, 0))
    out.paste(frame.convert("RGB"), (0, band))
    out.info["duration"] = frame.info.get("duration", DEFAULT_DURATION)
    result.append(out)
  return result


def to_gif(ims: Sequence[Image.Image], duration: Union[List[int], int, None] = None) -> bytes:
  if not ims:
    raise ValueError("No frames to encode.")
  if duration is None:
    duration = [im.info.get("duration", DEFAULT_DURATION) for im in ims]
  if isinstance(duration, list) and len(duration) != len(ims):
    raise ValueError("Duration list length doesn't match frames count.")
  config = misc.CONFIG()
  if any(im.mode != "P" for im in ims):
    ims = quantize(ims)
  f = BytesIO()
  ims[0].save(
    f, "GIF", append_images=ims[1:], save_all=True, loop=config.loop, disposal=config.disposal,
    duration=duration,
  )
  return f.getvalue()
