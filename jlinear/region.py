#This module contains the in-memory representation of a Linear region.
#
#A region is a sparsely populated 32x32 grid of chunks.
#Chunks are stored in slots; slot i holds the chunk at region-local coordinates ( i % 32, i // 32 ).
#Every slot has a timestamp (seconds since unix epoch) recording when its chunk was last saved.

from array import array
from collections import namedtuple
from time import time

from jlinear.shared import REGION_WIDTH, REGION_SLOTS, OutOfBoundsError, assertSlotIndex as _asi

class Chunk( namedtuple( "Chunk", ( "data", "x", "z" ) ) ):
    """
    Chunk( data, x, z )

    An immutable chunk.
    data is the chunk's payload, a non-empty bytes-like object. JLinear does not interpret its contents.
        A slot with an empty payload is indistinguishable from an empty slot on disk, so empty payloads raise OutOfBoundsError.
        Objects that aren't bytes-like (e.g. ints) raise TypeError.
    x and z are the chunk's absolute (world) chunk coordinates.
    """
    __slots__ = ()

    def __new__( cls, data, x, z ):
        data = bytes( memoryview( data ) )
        if len( data ) == 0 or len( data ) > 2147483647:
            raise OutOfBoundsError( len( data ), 1, 2147483647 )
        return super().__new__( cls, data, x, z )

    def getLX( self ):
        """Returns the chunk's region-local x coordinate, in the range [0,31]."""
        return self.x & ( REGION_WIDTH - 1 )
    lx = property( getLX )

    def getLZ( self ):
        """Returns the chunk's region-local z coordinate, in the range [0,31]."""
        return self.z & ( REGION_WIDTH - 1 )
    lz = property( getLZ )

    def getIndex( self ):
        """Returns the index of the slot this chunk occupies in its region."""
        return REGION_WIDTH * self.lz + self.lx
    index = property( getIndex )

    #Don't print data; chunk payloads are typically several kilobytes long.
    def __repr__( self ):
        return "Chunk({:d}, {:d}, <{:d} bytes>)".format( self.x, self.z, len( self.data ) )

class Region:
    """
    Represents a Linear region.
    A region consists of a sparsely populated 32x32 grid of chunks.

    x and z are the region coordinates.
    chunks is a list of 1024 slots. Each slot holds either a Chunk or None.
    timestamps is an array of 1024 signed 4-byte integers, the last-saved timestamp of each slot.
    newestTimestamp is the timestamp of the most recently saved chunk in the region.
    """
    __slots__ = ( "x", "z", "chunks", "timestamps", "newestTimestamp" )

    def __init__( self, rx, rz, chunks=None, timestamps=None, newestTimestamp=0 ):
        """
        Constructor.
        rx and rz are the region coordinates.
        chunks is an optional sequence of 1024 slots (Chunk or None). Defaults to an empty region.
        timestamps is an optional sequence of 1024 timestamps. Defaults to all zeroes.
        Raises ValueError if chunks or timestamps doesn't have exactly 1024 entries.
        """
        self.x = rx
        self.z = rz

        if chunks is None:
            chunks = [ None ] * REGION_SLOTS
        else:
            chunks = list( chunks )
            if len( chunks ) != REGION_SLOTS:
                raise ValueError( "Expected {:d} chunk slots, got {:d}.".format( REGION_SLOTS, len( chunks ) ) )
        self.chunks = chunks

        if timestamps is None:
            timestamps = array( "i", [ 0 ] * REGION_SLOTS )
        else:
            timestamps = array( "i", timestamps )
            if len( timestamps ) != REGION_SLOTS:
                raise ValueError( "Expected {:d} timestamps, got {:d}.".format( REGION_SLOTS, len( timestamps ) ) )
        self.timestamps = timestamps

        self.newestTimestamp = newestTimestamp

    def countPopulated( self ):
        """
        Returns the number of chunks in this region.
        Returns an int in the range [0, 1024].
        """
        return sum( 1 for c in self.chunks if c is not None )
    __len__ = countPopulated

    def getChunk( self, lx, lz ):
        """
        Returns the chunk with the given chunk coordinates relative to this region, (lx, lz).
        Returns None if there is no chunk with these coordinates.
        lx and lz are expected to be in the range [0,31].
        """
        return self.chunks[ _asi( lx, lz ) ]

    def getTimestamp( self, lx, lz ):
        """Returns the timestamp of the slot at (lx, lz)."""
        return self.timestamps[ _asi( lx, lz ) ]

    def setChunk( self, lx, lz, data, timestamp=None ):
        """
        Stores a chunk with the given payload, data, at the chunk coordinates relative to this region, (lx, lz).
        Any chunk already stored there is replaced.
        timestamp is the time the chunk was saved, in seconds since the unix epoch. Defaults to the current time.
        The region's newestTimestamp is updated if timestamp is newer.
        Returns the new Chunk.
        """
        i = _asi( lx, lz )
        if timestamp is None:
            timestamp = int( time() )

        c = Chunk( data, REGION_WIDTH * self.x + lx, REGION_WIDTH * self.z + lz )
        #Raises OverflowError before the slot is touched if timestamp doesn't fit in 4 bytes
        self.timestamps[i] = timestamp
        self.chunks[i] = c
        if timestamp > self.newestTimestamp:
            self.newestTimestamp = timestamp
        return c

    def removeChunk( self, lx, lz ):
        """Empties the slot at (lx, lz). Returns the chunk that was stored there, or None."""
        i = _asi( lx, lz )
        c = self.chunks[i]
        self.chunks[i] = None
        self.timestamps[i] = 0
        return c

    def iterChunks( self ):
        """Iterates over every chunk in this region in slot order."""
        for c in self.chunks:
            if c is not None:
                yield c

    def write( self, directory, compressionLevel=None ):
        """
        Writes this region to "<directory>/r.<x>.<z>.linear".
        See help( jlinear.write ) for more information.
        """
        from jlinear.linear import write
        return write( self, directory, compressionLevel )

    def __getitem__( self, index ):
        """Handles region[lx,lz]. Equivalent to region.getChunk( lx, lz )."""
        return self.getChunk( *index )

    #Handles iter( region ). Equivalent to region.iterChunks().
    __iter__ = iterChunks

    def _key( self ):
        #Empty slots don't store timestamps on disk, so they are ignored here.
        return (
            self.x,
            self.z,
            self.newestTimestamp,
            self.chunks,
            [ t if c is not None else 0 for c, t in zip( self.chunks, self.timestamps ) ]
        )

    def __eq__( self, other ):
        if not isinstance( other, Region ):
            return NotImplemented
        return self._key() == other._key()

    __hash__ = None

    def __repr__( self ):
        return "Region({:d}, {:d})".format( self.x, self.z )

    def __str__( self ):
        """Returns the occupancy of this region as a 32x32 grid; "■" for populated slots, "□" for empty ones."""
        rows = []
        chunks = self.chunks
        for i in range( 0, REGION_SLOTS, REGION_WIDTH ):
            rows.append( "".join( "□" if c is None else "■" for c in chunks[ i : i + REGION_WIDTH ] ) )
        return "\n".join( rows )
