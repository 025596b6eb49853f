from io import BytesIO
from typing import List

import numpy as np
import pytest
import yaml
from PIL import Image

from gifquant import QuantizeError, imutil

COLORS = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]


def make_gif(durations: List[int]) -> Image.Image:
  ims = [Image.new("RGB", (20, 10), COLORS[i % 3]) for i in range(len(durations))]
  f = BytesIO()
  ims[0].save(f, "GIF", append_images=ims[1:], save_all=True, duration=durations, loop=0)
  f.seek(0)
  return Image.open(f)


def test_frames_of_still_image():
  im = Image.new("RGB", (4, 4))
  assert list(imutil.frames(im)) == [im]


def test_palette_from_frames():
  ims = [Image.new("RGB", (2, 3), c) for c in COLORS[:2]]
  palette = imutil.palette_from_frames(ims)
  assert palette.shape == (12, 3)
  assert palette.dtype == np.uint8
  assert palette[0].tolist() == [255, 0, 0]
  assert palette[-1].tolist() == [0, 255, 0]
  assert imutil.palette_from_frames([]).shape == (0, 3)


def test_quantize_shares_one_palette():
  ims = [Image.new("RGB", (4, 4), c) for c in COLORS]
  ims[0].info["duration"] = 40
  result = imutil.quantize(ims, 4)
  assert [im.mode for im in result] == ["P"] * 3
  assert len({bytes(im.getpalette() or []) for im in result}) == 1
  assert [im.convert("RGB").getpixel((1, 1)) for im in result] == COLORS
  assert result[0].info["duration"] == 40


def test_quantize_uses_configured_colours(config_dir):
  with open(config_dir / "quantize.yaml", "w") as f:
    yaml.dump({"colours": 1}, f)
  ims = [Image.new("RGB", (4, 4), c) for c in [(0, 0, 0), (255, 255, 255)]]
  result = imutil.quantize(ims)
  assert result[0].convert("RGB").getpixel((0, 0)) == (127, 127, 127)
  assert result[1].convert("RGB").getpixel((0, 0)) == (127, 127, 127)


def test_quantize_without_frames():
  with pytest.raises(QuantizeError):
    imutil.quantize([])


def test_caption_still_image():
  im = Image.new("RGB", (100, 50), (0, 255, 0))
  result = imutil.caption(im, "hi")
  assert len(result) == 1
  out = result[0]
  assert out.size == (100, 60)
  assert out.getpixel((0, 0)) == (255, 255, 255)
  assert out.getpixel((0, 10)) == (0, 255, 0)
  assert out.getpixel((99, 59)) == (0, 255, 0)


def test_caption_draws_text():
  im = Image.new("RGB", (200, 100), (0, 255, 0))
  band = imutil.caption(im, "caption")[0].crop((0, 0, 200, 20))
  colors = {color for _, color in band.getcolors(200 * 20) or []}
  assert (255, 255, 255) in colors
  assert len(colors) > 1


def test_caption_keeps_every_frame():
  result = imutil.caption(make_gif([50, 60, 70]), "")
  assert len(result) == 3
  assert [im.info["duration"] for im in result] == [50, 60, 70]
  assert [im.getpixel((5, 0)) for im in result] == [(255, 255, 255)] * 3
  assert [im.getpixel((5, 8)) for im in result] == COLORS


def test_to_gif_round_trip():
  ims = imutil.caption(make_gif([50, 60, 70]), "")
  data = imutil.to_gif(ims)
  assert data.startswith(b"GIF8")
  im = Image.open(BytesIO(data))
  assert im.n_frames == 3
  assert im.size == (20, 12)
  assert im.convert("RGB").getpixel((5, 8)) == COLORS[0]


def test_to_gif_checks_durations():
  ims = [Image.new("RGB", (4, 4), c) for c in COLORS]
  with pytest.raises(ValueError):
    imutil.to_gif(ims, [100, 100])
  with pytest.raises(ValueError):
    imutil.to_gif([])
