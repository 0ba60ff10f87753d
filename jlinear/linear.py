#This module contains code for reading and writing the Linear region format.
#
#A Linear file stores a single region (a 32x32 grid of chunks) in one zstd-compressed block.
#All integers are big-endian.
#
#Files are laid out like so:
#    Superblock (32 bytes):
#        signature          8 bytes, always LINEAR_SIGNATURE
#        version            1 byte,  one of LINEAR_SUPPORTED
#        newest timestamp   8 bytes, timestamp of the most recently saved chunk
#        compression level  1 byte,  informational; zstd frames describe themselves
#        chunk count        2 bytes, number of populated slots
#        compressed length  4 bytes, size of the compressed payload in bytes
#        hash               8 bytes, reserved; always 0
#    Compressed payload (compressed length bytes)
#    Footer (8 bytes), always LINEAR_SIGNATURE
#
#Decompressed, the payload consists of a table of 1024 ( size, timestamp ) pairs (4 bytes each),
#followed by the payloads of every populated slot, concatenated in slot order.
#Empty slots have a size and timestamp of 0.

import os
import os.path
import re
import logging

import zstandard as zstd

from jlinear.shared import (
    LINEAR_SIGNATURE, LINEAR_VERSION, LINEAR_SUPPORTED, REGION_WIDTH, REGION_SLOTS, HEADER_SIZE,
    PathFormatError, CompressionError, InvalidSignatureError, InvalidFooterError, InvalidVersionError,
    DecompressedSizeError, ChunkCountError, OutOfBoundsError,
    read as _r, _SB, _SLOT, _L
)
from jlinear.region    import Region, Chunk
from jlinear.config    import getCompressionLevel, assertCompressionLevel
from jlinear.safewriter import safewriter

logger = logging.getLogger( __name__ )

#Regular expression that matches Linear filenames; i.e. filenames of the form "r.{x}.{z}.linear" (where x and z are region coordinates)
RE_FILENAME  = re.compile( r"^r\.(-?\d+)\.(-?\d+)\.linear$", re.IGNORECASE )
FMT_FILENAME = "r.{:d}.{:d}.linear"

def getFilename( rx, rz ):
    """Returns the name of the file the region with region coordinates (rx, rz) is stored in, e.g. "r.-1.2.linear"."""
    return FMT_FILENAME.format( rx, rz )

def parseFilename( path ):
    """
    Returns the region coordinates (rx, rz) encoded in the name of the file at the given path.
    Raises PathFormatError if the filename is not of the form "r.{x}.{z}.linear".
    """
    m = RE_FILENAME.match( os.path.basename( os.fspath( path ) ) )
    if m is None:
        raise PathFormatError( path )
    return int( m.group( 1 ) ), int( m.group( 2 ) )

def write( region, directory, compressionLevel=None, version=LINEAR_VERSION ):
    """
    Writes the given region to "<directory>/r.<x>.<z>.linear" and returns the path of the written file.

    compressionLevel is an optional zstd compression level. Defaults to jlinear.config.getCompressionLevel().
    version is an optional version number to write. Defaults to LINEAR_VERSION.

    The file is written atomically: if anything goes wrong, any file previously stored at that path is left untouched.
    """
    if compressionLevel is None:
        compressionLevel = getCompressionLevel()
    path = os.path.join( directory, getFilename( region.x, region.z ) )

    with safewriter( path ) as file:
        _writeImpl( region, file, compressionLevel, version )

    logger.debug( "Wrote %d chunks to %s", region.countPopulated(), path )
    return path

def _writeImpl( region, output, compressionLevel, version ):
    """
    Implementation of write().
    output is expected to be a writable file-like object.
    """
    if version not in LINEAR_SUPPORTED:
        raise InvalidVersionError( version )
    assertCompressionLevel( compressionLevel )

    chunks     = region.chunks
    timestamps = region.timestamps

    #Slot table, followed by every chunk's payload
    table = bytearray( HEADER_SIZE )
    payloads = []
    for i in range( REGION_SLOTS ):
        c = chunks[i]
        #Zero-length payloads would be read back as empty slots
        if c is not None and len( c.data ) != 0:
            _SLOT.pack_into( table, 8*i, len( c.data ), timestamps[i] )
            payloads.append( c.data )

    raw = b"".join( [ table ] + payloads )
    try:
        compressed = zstd.ZstdCompressor( level=compressionLevel ).compress( raw )
    except zstd.ZstdError as e:
        raise CompressionError( "Failed to compress region ({:d}, {:d}): {}".format( region.x, region.z, e ) ) from e

    output.write( _SB.pack(
        LINEAR_SIGNATURE,
        version,
        region.newestTimestamp,
        compressionLevel,
        len( payloads ),
        len( compressed ),
        0
    ) )
    output.write( compressed )
    output.write( _L.pack( LINEAR_SIGNATURE ) )

def read( source, rx=None, rz=None ):
    """
    Reads a Linear file and returns its contents as a Region.

    source can be the path of the file to read from (as a str or path-like object), or a readable and seekable file-like object.
        If source is a path, the region coordinates are taken from its filename, which must be of the form "r.{x}.{z}.linear".
        If source is a file-like object, rx and rz must be given.
    rx and rz are optional region coordinates. If given, they take precedence over coordinates in the filename.

    Raises PathFormatError if the region coordinates cannot be determined.
    Raises a LinearFormatError subclass if the file is not a valid Linear file, CompressionError if its payload can't be decompressed,
    and EOFError if the file ends prematurely.
    """
    if isinstance( source, ( str, os.PathLike ) ):
        if rx is None or rz is None:
            rx, rz = parseFilename( source )
        with open( source, "rb" ) as file:
            region = _readImpl( file, rx, rz )
        logger.debug( "Read %d chunks from %s", region.countPopulated(), os.fspath( source ) )
        return region

    if rx is None or rz is None:
        raise PathFormatError( getattr( source, "name", source ) )
    return _readImpl( source, rx, rz )

def _readImpl( input, rx, rz ):
    """
    Implementation of read().
    input is expected to be a readable, seekable file-like object positioned at the start of a Linear file.
    See help( jlinear.read ) for further documentation.
    """
    signature, version, newestTimestamp, _, chunkCount, compressedLength, datahash = _SB.unpack( _r( input, _SB.size ) )
    if signature != LINEAR_SIGNATURE:
        raise InvalidSignatureError( signature )
    if version not in LINEAR_SUPPORTED:
        raise InvalidVersionError( version )
    if compressedLength < 0:
        raise OutOfBoundsError( compressedLength, 0, 2147483647 )
    if datahash != 0:
        logger.warning( "Region (%d, %d) has a nonzero hash; hashes are not verified", rx, rz )

    #The footer is checked independently of the superblock.
    start = input.tell()
    input.seek( -_L.size, os.SEEK_END )
    footer = _L.unpack( _r( input, _L.size ) )[0]
    if footer != LINEAR_SIGNATURE:
        raise InvalidFooterError( footer )
    input.seek( start, os.SEEK_SET )

    compressed = _r( input, compressedLength )
    try:
        dobj = zstd.ZstdDecompressor().decompressobj()
        data = dobj.decompress( compressed )
    except zstd.ZstdError as e:
        raise CompressionError( "Failed to decompress region ({:d}, {:d}): {}".format( rx, rz, e ) ) from e
    #The payload must be exactly one complete frame
    if not dobj.eof:
        raise CompressionError( "Failed to decompress region ({:d}, {:d}): payload ends mid-frame".format( rx, rz ) )
    if dobj.unused_data:
        raise CompressionError( "Failed to decompress region ({:d}, {:d}): {:d} bytes of trailing data after frame".format( rx, rz, len( dobj.unused_data ) ) )

    if len( data ) < HEADER_SIZE:
        raise DecompressedSizeError( len( data ), HEADER_SIZE )

    #Read the slot table
    sizes      = [ 0 ] * REGION_SLOTS
    timestamps = [ 0 ] * REGION_SLOTS
    totalSize  = 0
    realCount  = 0
    for i, ( size, timestamp ) in enumerate( _SLOT.iter_unpack( data[ : HEADER_SIZE ] ) ):
        if size < 0:
            raise OutOfBoundsError( size, 0, 2147483647 )
        sizes[i]      = size
        timestamps[i] = timestamp
        totalSize += size
        if size != 0:
            realCount += 1

    if totalSize + HEADER_SIZE != len( data ):
        raise DecompressedSizeError( len( data ), totalSize + HEADER_SIZE )
    if realCount != chunkCount:
        raise ChunkCountError( chunkCount, realCount )

    #Save raw chunk data
    chunks = [ None ] * REGION_SLOTS
    view   = memoryview( data )
    offset = HEADER_SIZE
    for i in range( REGION_SLOTS ):
        size = sizes[i]
        if size == 0:
            continue
        lz, lx = divmod( i, REGION_WIDTH )
        chunks[i] = Chunk(
            view[ offset : offset + size ],
            REGION_WIDTH * rx + lx,
            REGION_WIDTH * rz + lz
        )
        offset += size

    return Region( rx, rz, chunks, timestamps, newestTimestamp )
