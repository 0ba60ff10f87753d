from struct import Struct

#Magic number found at both the start and the end of every Linear file.
LINEAR_SIGNATURE = -4323716122432332390

#Version written by this library, and the set of versions it is able to read.
#Both versions share the same superblock layout; the newest timestamp is a signed 8-byte integer in either of them.
LINEAR_VERSION   = 2
LINEAR_SUPPORTED = ( 1, 2 )

#Every region holds a 32x32 grid of chunk slots.
REGION_WIDTH = 32
REGION_SLOTS = REGION_WIDTH * REGION_WIDTH

#The decompressed payload starts with a table of 1024 ( size, timestamp ) pairs, each a signed big-endian 4-byte integer.
HEADER_SIZE = 8 * REGION_SLOTS

#Range of the 1-byte compression level stored in the superblock.
MIN_COMPRESSION_LEVEL = -128
MAX_COMPRESSION_LEVEL = 127

#Structs
_SB   = Struct( ">qbqbhiq" )    #Superblock: signature, version, newest timestamp, compression level, chunk count, compressed length, hash (32 bytes)
_SLOT = Struct( ">ii"      )    #Slot table entry: size, timestamp (8 bytes)
_L    = Struct( ">q"       )    #Signed big-endian long (8 bytes); used for the signature footer

class LinearError( Exception ):
    """Base class of every exception raised by JLinear."""
    pass

class PathFormatError( LinearError, ValueError ):
    """
    PathFormatError( path )

    This exception is raised when region coordinates cannot be determined from a filename.
    Linear files are expected to be named "r.{x}.{z}.linear", where x and z are the region coordinates.
    """
    def __str__( self ):
        return "Cannot determine region coordinates from \"{}\"; expected a filename of the form \"r.<x>.<z>.linear\".".format( self.args[0] )

class CompressionError( LinearError ):
    """This exception is raised when the compressed payload of a Linear file cannot be compressed or decompressed."""
    pass

class LinearFormatError( LinearError ):
    """This exception is raised when reading or writing data that violates the Linear format."""
    pass

class InvalidSignatureError( LinearFormatError ):
    """
    InvalidSignatureError( signature )

    This exception is raised when the first 8 bytes of a file do not contain the Linear signature.
    """
    def __str__( self ):
        return "Invalid signature: {:d}".format( self.args[0] )

class InvalidFooterError( LinearFormatError ):
    """
    InvalidFooterError( signature )

    This exception is raised when the last 8 bytes of a file do not contain the Linear signature.
    This typically means the file was truncated or only partially written.
    """
    def __str__( self ):
        return "Invalid footer signature: {:d}".format( self.args[0] )

class InvalidVersionError( LinearFormatError ):
    """
    InvalidVersionError( version )

    This exception is raised when reading or writing a Linear file with a version outside of LINEAR_SUPPORTED.
    """
    def __str__( self ):
        return "Invalid version: {:d}".format( self.args[0] )

class DecompressedSizeError( LinearFormatError ):
    """
    DecompressedSizeError( actual, expected )

    This exception is raised when the size of the decompressed payload disagrees with the sizes listed in its slot table.
    """
    def __str__( self ):
        return "Invalid decompressed size: expected {1:d} bytes, but got {0:d}.".format( *self.args )

class ChunkCountError( LinearFormatError ):
    """
    ChunkCountError( declared, real )

    This exception is raised when the chunk count in the superblock disagrees with the number of populated slots in the slot table.
    """
    def __str__( self ):
        return "Invalid chunk count: superblock declares {:d}, but the slot table has {:d}.".format( *self.args )

class OutOfBoundsError( LinearFormatError ):
    """
    OutOfBoundsError( value, min, max )

    This exception is raised when reading or writing a value that is outside of the valid range for its field,
    e.g. a negative chunk size, a compression level that doesn't fit in a byte, or a slot coordinate outside of [0,31].
    """
    def __str__( self ):
        return "Value {:d} is outside of expected range [{:d},{:d}].".format( *self.args )

#_r
def read( i, n ):
    """
    Reads n bytes from i (a readable file-like object).
    Raises an EOFError if the end-of-file is encountered before n bytes can be read.
    """
    b = i.read( n )
    if len( b ) != n:
        raise EOFError( "End of file reached prematurely!" )
    return b

#_asi
def assertSlotIndex( lx, lz ):
    """
    Raises OutOfBoundsError if either of the region-local chunk coordinates, lx and lz, is outside of [0,31].
    Otherwise, returns the index of the slot at those coordinates.
    """
    for v in ( lx, lz ):
        if v < 0 or v >= REGION_WIDTH:
            raise OutOfBoundsError( v, 0, REGION_WIDTH - 1 )
    return REGION_WIDTH * lz + lx
