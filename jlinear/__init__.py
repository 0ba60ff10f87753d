"""
JLinear is a library for reading and writing Linear region files for Python 3.
A Linear file stores a single 32x32 region of chunks in one zstd-compressed block, framed by a fixed-size superblock and a signature footer.
"""
import logging

#Constants, Exceptions
from jlinear.shared import (
    LINEAR_SIGNATURE, LINEAR_VERSION, LINEAR_SUPPORTED, REGION_WIDTH, REGION_SLOTS, HEADER_SIZE,
    LinearError, PathFormatError, CompressionError, LinearFormatError,
    InvalidSignatureError, InvalidFooterError, InvalidVersionError, DecompressedSizeError, ChunkCountError, OutOfBoundsError
)

#Region model
from jlinear.region import Region, Chunk

#Reading and writing
from jlinear.linear import read, write, getFilename, parseFilename

#Configuration
from jlinear.config import setCompressionLevel, getCompressionLevel

logging.getLogger( __name__ ).addHandler( logging.NullHandler() )

#Export everything we imported above
__all__ = [
    "LINEAR_SIGNATURE", "LINEAR_VERSION", "LINEAR_SUPPORTED", "REGION_WIDTH", "REGION_SLOTS", "HEADER_SIZE",
    "LinearError", "PathFormatError", "CompressionError", "LinearFormatError",
    "InvalidSignatureError", "InvalidFooterError", "InvalidVersionError", "DecompressedSizeError", "ChunkCountError", "OutOfBoundsError",
    "Region", "Chunk",
    "read", "write", "getFilename", "parseFilename",
    "setCompressionLevel", "getCompressionLevel"
]
