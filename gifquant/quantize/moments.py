# pyright: strict
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from ..colorutil import RGB, SIDE_LENGTH, reduce, squared

'''
Cumulative color moments over the reduced RGB grid.

After `ColourSpace.cumulate`, every cell holds the statistics of all cells at or below it on every
axis, so the statistics of any box can be read back from its eight corners.
'''

Bound = Optional[int]
'''A lower bound on one axis. None means the box extends below coordinate 0.'''
Corner = Tuple[Bound, Bound, Bound]


class Axis(Enum):
  RED = 0
  GREEN = 1
  BLUE = 2


@dataclass(frozen=True)
class ColourEntry:
  '''
  Sums over a set of pixels: `m` is the componentwise sum of the raw 8-bit colors, `count` the
  number of pixels and `m2` the sum of their squared magnitudes.
  '''
  m: RGB = (0, 0, 0)
  count: int = 0
  m2: int = 0

  def __add__(self, other: "ColourEntry") -> "ColourEntry":
    return ColourEntry(
      (self.m[0] + other.m[0], self.m[1] + other.m[1], self.m[2] + other.m[2]),
      self.count + other.count,
      self.m2 + other.m2,
    )

  def __sub__(self, other: "ColourEntry") -> "ColourEntry":
    result = ColourEntry(
      (self.m[0] - other.m[0], self.m[1] - other.m[1], self.m[2] - other.m[2]),
      self.count - other.count,
      self.m2 - other.m2,
    )
    # Only a subset may be taken from a superset.
    assert result.count >= 0 and result.m2 >= 0 and min(result.m) >= 0, (self, other)
    return result

  @property
  def norm(self) -> int:
    '''Squared length of the first moment.'''
    return squared(self.m)

  def mean(self) -> RGB:
    r, g, b = self.m
    return r // self.count, g // self.count, b // self.count

  def variance(self) -> float:
    '''Sum of squared distances from the mean.'''
    return (self.m2 * self.count - self.norm) / self.count


ZERO = ColourEntry()


@dataclass(frozen=True)
class ColourCube:
  '''
  A box on the reduced grid. `start` is exclusive and `end` is inclusive, so a cube covers
  `start < x <= end` on every axis.
  '''
  start: Corner
  end: RGB

  def span(self, axis: Axis) -> int:
    start = self.start[axis.value]
    return self.end[axis.value] - (-1 if start is None else start)

  @property
  def is_unit(self) -> bool:
    return all(self.span(axis) == 1 for axis in Axis)

  def cells(self, axis: Axis) -> range:
    start = self.start[axis.value]
    return range(0 if start is None else start + 1, self.end[axis.value] + 1)

  def split(self, axis: Axis, cut: int) -> Tuple["ColourCube", "ColourCube"]:
    end = list(self.end)
    end[axis.value] = cut
    start = list(self.start)
    start[axis.value] = cut
    return (
      ColourCube(self.start, (end[0], end[1], end[2])),
      ColourCube((start[0], start[1], start[2]), self.end),
    )

  @classmethod
  def whole(cls) -> "ColourCube":
    top = SIDE_LENGTH - 1
    return cls((None, None, None), (top, top, top))


def corners(cube: ColourCube) -> Tuple[List[Corner], List[Corner]]:
  '''Positive and negative corners of the inclusion-exclusion sum over a cube.'''
  (sr, sg, sb), (er, eg, eb) = cube.start, cube.end
  return (
    [(er, eg, eb), (er, sg, sb), (sr, eg, sb), (sr, sg, eb)],
    [(sr, sg, sb), (sr, eg, eb), (er, sg, eb), (er, eg, sb)],
  )


def face_corners(
  cube: ColourCube, axis: Axis, position: Bound,
) -> Tuple[List[Corner], List[Corner]]:
  '''
  Corners of the sum over the cube's cross-section on `axis`, extended down to 0 on that axis and
  cut at `position`.
  '''
  s, e = cube.start, cube.end
  if axis is Axis.RED:
    pos = [(position, s[1], s[2]), (position, e[1], e[2])]
    neg = [(position, e[1], s[2]), (position, s[1], e[2])]
  elif axis is Axis.GREEN:
    pos = [(s[0], position, s[2]), (e[0], position, e[2])]
    neg = [(e[0], position, s[2]), (s[0], position, e[2])]
  else:
    pos = [(s[0], s[1], position), (e[0], e[1], position)]
    neg = [(e[0], s[1], position), (s[0], e[1], position)]
  return pos, neg


class ColourSpace:
  '''A dense SIDE_LENGTH³ grid of ColourEntry, owned by a single quantization.'''

  def __init__(self) -> None:
    self.cells: List[List[List[ColourEntry]]] = [
      [[ZERO] * SIDE_LENGTH for _ in range(SIDE_LENGTH)] for _ in range(SIDE_LENGTH)
    ]
    self.cumulated = False

  def __getitem__(self, corner: Sequence[int]) -> ColourEntry:
    r, g, b = corner
    return self.cells[r][g][b]

  def histogram(self, counts: Mapping[RGB, int]) -> None:
    '''Adds every color, weighted by how many times it appears, to the bucket it reduces to.'''
    assert not self.cumulated, "histogram of a cumulated space"
    for color, count in counts.items():
      r, g, b = reduce(color)
      self.cells[r][g][b] += ColourEntry(
        (color[0] * count, color[1] * count, color[2] * count), count, squared(color) * count,
      )

  def cumulate(self) -> None:
    '''Turns the histogram into a summed volume table in place.'''
    assert not self.cumulated, "space cumulated twice"
    for r in range(SIDE_LENGTH):
      area = [ZERO] * SIDE_LENGTH
      for g in range(SIDE_LENGTH):
        line = ZERO
        for b in range(SIDE_LENGTH):
          line += self.cells[r][g][b]
          area[b] += line
          if r > 0:
            self.cells[r][g][b] = self.cells[r - 1][g][b] + area[b]
          else:
            self.cells[r][g][b] = area[b]
    self.cumulated = True

  def combine(self, pos: Iterable[Corner], neg: Iterable[Corner]) -> ColourEntry:
    # Unbounded corners lie below the grid and hold nothing.
    entry = ZERO
    for corner in pos:
      if None not in corner:
        entry += self[corner]  # type: ignore
    for corner in neg:
      if None not in corner:
        entry -= self[corner]  # type: ignore
    return entry

  def query(self, cube: ColourCube) -> ColourEntry:
    '''Statistics of every pixel inside the cube.'''
    return self.combine(*corners(cube))

  def face(self, cube: ColourCube, axis: Axis, position: Bound) -> ColourEntry:
    return self.combine(*face_corners(cube, axis, position))


def build(counts: Mapping[RGB, int]) -> ColourSpace:
  space = ColourSpace()
  space.histogram(counts)
  space.cumulate()
  return space
