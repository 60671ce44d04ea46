"""ExifTool process and stream readers."""
from .process import ExifToolProcess, encode_batch
from .readers import ErrorReader, OutputReader, StreamReader, iter_lines

__all__ = [
    "ExifToolProcess",
    "encode_batch",
    "StreamReader",
    "OutputReader",
    "ErrorReader",
    "iter_lines",
]
