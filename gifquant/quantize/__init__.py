from .quantizer_wu import MAX_COLORS, ColourLookup, QuantizeError, compress

__all__ = ["MAX_COLORS", "ColourLookup", "QuantizeError", "compress"]
