import os

import zstandard as zstd

from jlinear.shared import MIN_COMPRESSION_LEVEL, MAX_COMPRESSION_LEVEL, OutOfBoundsError

#Compression level used when no level is given to jlinear.write()
DEFAULT_COMPRESSION_LEVEL = 6

#Name of the environment variable that overrides DEFAULT_COMPRESSION_LEVEL
ENV_COMPRESSION_LEVEL = "JLINEAR_COMPRESSION_LEVEL"

#The level is stored in a single byte, but zstd tops out well below 127.
_maxLevel = min( MAX_COMPRESSION_LEVEL, zstd.MAX_COMPRESSION_LEVEL )

#Compression level returned by getCompressionLevel()
_compressionLevel = None

def assertCompressionLevel( level ):
    """Raises OutOfBoundsError if the given compression level can't be used to write a Linear file."""
    if level < MIN_COMPRESSION_LEVEL or level > _maxLevel:
        raise OutOfBoundsError( level, MIN_COMPRESSION_LEVEL, _maxLevel )

def setCompressionLevel( level ):
    """
    Sets the compression level returned by getCompressionLevel().
    Raises OutOfBoundsError if level is outside of [-128, zstandard.MAX_COMPRESSION_LEVEL].
    """
    global _compressionLevel
    assertCompressionLevel( level )
    _compressionLevel = level

def getDefaultCompressionLevel():
    """
    Return the default compression level.
    This is the value of the JLINEAR_COMPRESSION_LEVEL environment variable if it is set, or DEFAULT_COMPRESSION_LEVEL otherwise.
    Raise a ValueError if the environment variable is not an integer.
    """
    value = os.environ.get( ENV_COMPRESSION_LEVEL )
    if value is None or value.strip() == "":
        return DEFAULT_COMPRESSION_LEVEL
    try:
        return int( value )
    except ValueError as e:
        raise ValueError( "{} must be an integer, got \"{}\".".format( ENV_COMPRESSION_LEVEL, value ) ) from e

def getCompressionLevel():
    """
    Return the compression level used by jlinear.write() when none is given.
    If this level has not manually been set with setCompressionLevel(), sets it to getDefaultCompressionLevel().
    """
    if _compressionLevel is None:
        setCompressionLevel( getDefaultCompressionLevel() )
    return _compressionLevel

def resetCompressionLevel():
    """Forgets any level given to setCompressionLevel(); the next call to getCompressionLevel() will consult the environment again."""
    global _compressionLevel
    _compressionLevel = None
