from .quantize import MAX_COLORS, ColourLookup, QuantizeError, compress

__all__ = ["MAX_COLORS", "ColourLookup", "QuantizeError", "compress"]
__version__ = "0.1.0"
