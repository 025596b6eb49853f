# pyright: strict
from typing import Tuple, Union

'''
Helpers for 8-bit RGB colours and the reduced-precision grid coordinates the Wu quantizer
works in.
'''

RGB = Tuple[int, int, int]
Color = Union[RGB, int, str]

ROUND_BITS = 3
SIDE_LENGTH = (255 >> ROUND_BITS) + 1  # 32


def split_rgb(value: int) -> RGB:
  '''Splits a 0xRRGGBB integer into its components.'''
  return value >> 16 & 255, value >> 8 & 255, value & 255


def parse_hex(value: str) -> RGB:
  '''Parses "#RRGGBB" or "#RGB".'''
  value = value.lstrip("#")
  if len(value) == 3:
    value = "".join(c * 2 for c in value)
  if len(value) != 6:
    raise ValueError(f"Invalid color: #{value}")
  return split_rgb(int(value, 16))


def to_rgb(color: Color) -> RGB:
  if isinstance(color, str):
    return parse_hex(color)
  if isinstance(color, int):
    return split_rgb(color)
  return color


def reduce(color: RGB) -> RGB:
  '''Maps an 8-bit color onto the quantizer grid.'''
  r, g, b = color
  return r >> ROUND_BITS, g >> ROUND_BITS, b >> ROUND_BITS


def squared(color: RGB) -> int:
  r, g, b = color
  return r * r + g * g + b * b


def is_rgb(color: object) -> bool:
  if not isinstance(color, (tuple, list)) or len(color) != 3:  # type: ignore
    return False
  return all(isinstance(c, int) and 0 <= c <= 255 for c in color)  # type: ignore
