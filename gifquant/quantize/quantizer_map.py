# pyright: strict
from typing import Iterable, OrderedDict, Union

import numpy as np

from ..colorutil import RGB, is_rgb

'''
Quantizes a palette into a map, with keys of RGB colors, and values of the number of times that
color appears in the palette.
'''

Pixels = Union[Iterable[RGB], np.ndarray]


def quantize(pixels: Pixels) -> OrderedDict[RGB, int]:
  '''
  :param pixels: RGB tuples, or a uint8 array whose last axis holds RGB.
  :return: A Map with keys of RGB colors, and values of the number of times the color appears in
           the palette, in order of first appearance for tuple input and sorted for array input.
  :raises ValueError: if a color isn't a triple of integers in [0, 255].
  '''
  if isinstance(pixels, np.ndarray):
    return _quantize_array(pixels)
  countByColor = OrderedDict[RGB, int]()
  for pixel in pixels:
    if not is_rgb(pixel):
      raise ValueError(f"Not an 8-bit RGB color: {pixel!r}")
    pixel = (pixel[0], pixel[1], pixel[2])
    countByColor[pixel] = countByColor.get(pixel, 0) + 1
  return countByColor


def to_uint8(pixels: np.ndarray) -> np.ndarray:
  '''
  :raises ValueError: if a channel lies outside [0, 255], which a plain cast would wrap around.
  '''
  if pixels.dtype == np.uint8:
    return pixels
  if pixels.size and (pixels.min() < 0 or pixels.max() > 255):
    raise ValueError("Color channels must be in [0, 255]")
  return pixels.astype(np.uint8)


def _quantize_array(pixels: np.ndarray) -> OrderedDict[RGB, int]:
  if pixels.ndim < 1 or pixels.shape[-1] != 3:
    raise ValueError(f"Expected an array of RGB triples, got shape {pixels.shape}")
  if pixels.size == 0:
    return OrderedDict[RGB, int]()
  pixels = to_uint8(pixels)
  colors, counts = np.unique(pixels.reshape(-1, 3), axis=0, return_counts=True)
  countByColor = OrderedDict[RGB, int]()
  for (r, g, b), count in zip(colors.tolist(), counts.tolist()):
    countByColor[(r, g, b)] = count
  return countByColor
