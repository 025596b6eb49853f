import argparse
import sys
from typing import List, Optional

from loguru import logger
from PIL import Image

from . import QuantizeError, imutil, log

parser = argparse.ArgumentParser(
  "gifquant", description="Re-encode an image as a GIF whose frames share one Wu palette.",
)
parser.add_argument("input", help="Still or animated image to read")
parser.add_argument("output", help="Where to write the GIF")
parser.add_argument("-c", "--caption", help="Text to write in a band above every frame")
parser.add_argument(
  "-n", "--colours", type=int, help="Palette size, 1 to 256 (default from configs/quantize.yaml)",
)


def main(argv: Optional[List[str]] = None) -> int:
  args = parser.parse_args(argv)
  log.init()
  try:
    im = Image.open(args.input)
  except OSError as e:
    logger.error(f"Can't open {args.input}: {e}")
    return 1
  ims: List[Image.Image] = []
  with im:
    if args.caption is not None:
      ims = imutil.caption(im, args.caption)
    else:
      for frame in imutil.frames(im):
        out = frame.convert("RGB")
        out.info["duration"] = frame.info.get("duration", imutil.DEFAULT_DURATION)
        ims.append(out)
  try:
    data = imutil.to_gif(imutil.quantize(ims, args.colours))
  except QuantizeError as e:
    logger.error(f"Can't quantize {args.input}: {e}")
    return 1
  with open(args.output, "wb") as f:
    f.write(data)
  logger.info(f"Wrote {len(ims)} frames to {args.output}")
  return 0


if __name__ == "__main__":
  sys.exit(main())
