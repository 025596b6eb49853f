# pyright: strict
import bisect
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from ..colorutil import RGB, ROUND_BITS, SIDE_LENGTH, reduce
from . import quantizer_map
from .moments import Axis, ColourCube, ColourEntry, ColourSpace, build

'''
An image quantizer that divides the palette's pixels into clusters by recursively cutting an RGB
cube, based on the weight of pixels in each area of the cube.

The algorithm was described by Xiaolin Wu in Graphic Gems II, published in 1991.
'''

MAX_COLORS = 256
_UNSPLITTABLE = 0.0
_SEED_PRIORITY = 1.0


class QuantizeError(ValueError):
  '''Raised for input the quantizer can't work on.'''


@dataclass
class _QueueItem:
  cube: ColourCube
  priority: float


@dataclass
class _MaximizeResult:
  '''
  Where to cut a cube along one axis so that the two halves are separated as much as possible.
  '''
  axis: Axis
  cut: int
  maximum: float


class ColourLookup:
  '''Maps any 8-bit RGB color to the index of its palette entry.'''

  def __init__(self, volume: np.ndarray) -> None:
    self.volume = volume

  def lookup(self, color: RGB) -> int:
    r, g, b = reduce(color)
    return int(self.volume[r, g, b])

  __getitem__ = lookup

  def remap(self, pixels: np.ndarray) -> np.ndarray:
    '''
    :param pixels: Array whose last axis holds RGB, with every channel in [0, 255].
    :return: uint8 array of palette indices with the same leading shape.
    :raises QuantizeError: if the array doesn't hold 8-bit RGB colors.
    '''
    pixels = np.asarray(pixels)
    if pixels.ndim < 1 or pixels.shape[-1] != 3:
      raise QuantizeError(f"Expected an array of RGB triples, got shape {pixels.shape}")
    try:
      reduced = quantizer_map.to_uint8(pixels) >> ROUND_BITS
    except ValueError as e:
      raise QuantizeError(str(e)) from e
    return self.volume[reduced[..., 0], reduced[..., 1], reduced[..., 2]]


class _QuantizerWu:
  def __init__(self, space: ColourSpace) -> None:
    self.space = space
    self.queue: List[_QueueItem] = []

  def maximize(
    self, cube: ColourCube, axis: Axis, whole: ColourEntry,
  ) -> Optional[_MaximizeResult]:
    base = self.space.face(cube, axis, cube.start[axis.value])
    best: Optional[_MaximizeResult] = None
    maximum = 0.0
    # The last cell is excluded, cutting there would leave the second half empty.
    for cut in cube.cells(axis)[:-1]:
      half = self.space.face(cube, axis, cut) - base
      if half.count == 0:
        continue
      # Cumulative counts only grow, no later cut can leave anything for the other half.
      if half.count == whole.count:
        break
      other = whole - half
      temp = half.norm / half.count + other.norm / other.count
      if temp > maximum:
        maximum = temp
        best = _MaximizeResult(axis, cut, temp)
    return best

  def cut(self, cube: ColourCube) -> Optional[Tuple[ColourCube, ColourCube]]:
    whole = self.space.query(cube)
    if whole.count <= 1:
      return None
    best: Optional[_MaximizeResult] = None
    for axis in Axis:
      result = self.maximize(cube, axis, whole)
      if result is not None and (best is None or result.maximum > best.maximum):
        best = result
    if best is None:
      return None
    logger.trace(f"Cut {cube} on {best.axis.name} at {best.cut} ({best.maximum:.2f})")
    return cube.split(best.axis, best.cut)

  def insert(self, cube: ColourCube) -> None:
    if cube.is_unit:
      self.queue.insert(0, _QueueItem(cube, _UNSPLITTABLE))
      return
    item = _QueueItem(cube, self.space.query(cube).variance())
    bisect.insort(self.queue, item, key=lambda x: x.priority)

  def create_boxes(self, max_colors: int) -> List[ColourCube]:
    self.queue = [_QueueItem(ColourCube.whole(), _SEED_PRIORITY)]
    while len(self.queue) < max_colors:
      # Everything left is unsplittable, the entry stays so that the cubes cover the space.
      if self.queue[-1].priority == _UNSPLITTABLE:
        logger.debug(f"Nothing left to split, stopping at {len(self.queue)} colors")
        break
      item = self.queue.pop()
      parts = self.cut(item.cube)
      if parts is None:
        self.queue.insert(0, _QueueItem(item.cube, _UNSPLITTABLE))
        continue
      for part in parts:
        self.insert(part)
    return [item.cube for item in self.queue]

  def create_result(self, cubes: Sequence[ColourCube]) -> Tuple[List[RGB], ColourLookup]:
    colors: List[RGB] = []
    volume = np.full((SIDE_LENGTH,) * 3, -1, np.int16)
    for i, cube in enumerate(cubes):
      colors.append(self.space.query(cube).mean())
      r, g, b = (cube.cells(axis) for axis in Axis)
      block = volume[r.start:r.stop, g.start:g.stop, b.start:b.stop]
      assert (block == -1).all(), f"{cube} overlaps another cube"
      block[...] = i
    assert (volume >= 0).all(), "cubes don't cover the color space"
    return colors, ColourLookup(volume.astype(np.uint8))


def compress(palette: quantizer_map.Pixels, n_colours: int) -> Tuple[List[RGB], ColourLookup]:
  '''
  :param palette: Colors to quantize, as RGB tuples or a uint8 array whose last axis holds RGB.
  :param n_colours: The number of colors to divide the palette into, at most 256. A lower number
                    of colors may be returned.
  :return: The quantized palette, and a lookup from any RGB color to its index in that palette.
  :raises QuantizeError: if the palette is empty or malformed, or n_colours is out of range.
  '''
  if not isinstance(n_colours, (int, np.integer)) or isinstance(n_colours, bool):
    raise QuantizeError(f"n_colours must be an integer, got {n_colours!r}")
  n_colours = int(n_colours)
  if not 1 <= n_colours <= MAX_COLORS:
    raise QuantizeError(f"n_colours must be between 1 and {MAX_COLORS}, got {n_colours}")
  try:
    counts = quantizer_map.quantize(palette)
  except ValueError as e:
    raise QuantizeError(str(e)) from e
  if not counts:
    raise QuantizeError("Palette is empty")
  logger.debug(f"Quantizing {len(counts)} distinct colors into at most {n_colours}")
  quantizer = _QuantizerWu(build(counts))
  cubes = quantizer.create_boxes(n_colours)
  colors, lookup = quantizer.create_result(cubes)
  logger.debug(f"Quantized into {len(colors)} colors")
  return colors, lookup
