import os
import os.path
import logging

logger = logging.getLogger( __name__ )

#Suffix appended to the target path to name the temporary file being written
WIP_SUFFIX = ".wip"

def _syncDirectory( path ):
    """
    Flushes the directory entry at path to disk so a rename inside it survives a crash.
    Only POSIX systems can open directories; elsewhere this does nothing.
    """
    if os.name != "posix":
        return
    fd = os.open( path or os.curdir, os.O_RDONLY )
    try:
        os.fsync( fd )
    finally:
        os.close( fd )

def safewriter( target ):
    """
    Returns a SafeWriter that atomically replaces the file at target.

    Use it in a with block:
        with safewriter( "r.0.0.linear" ) as file:
            file.write( ... )

    Bytes are written to "<target>.wip". When the with block exits normally, the temporary file is flushed to disk
    and renamed to target in a single step, so target is never observed in a partially written state.
    If the with block raises an exception (or the rename itself fails), the temporary file is removed and
    whatever was previously stored at target is left untouched.
    """
    return SafeWriter( target )

class SafeWriter:
    """Context manager implementing the write-to-temporary-file-then-rename pattern. See help( jlinear.safewriter.safewriter )."""
    def __init__( self, target ):
        self.target = os.fspath( target )
        self.path   = self.target + WIP_SUFFIX
        self._o     = None

    def __enter__( self ):
        self._o = open( self.path, "wb" )
        return self._o

    def __exit__( self, exc_type, exc_value, traceback ):
        """Commits the temporary file if the with block completed, or discards it otherwise."""
        o = self._o
        self._o = None
        committed = False
        try:
            if exc_type is None:
                o.flush()
                os.fsync( o.fileno() )
                o.close()
                os.replace( self.path, self.target )
                committed = True
                _syncDirectory( os.path.dirname( self.target ) )
        finally:
            if not committed:
                o.close()
                self._discard()
        return False

    def _discard( self ):
        """Removes the temporary file, if it exists."""
        try:
            os.remove( self.path )
        except FileNotFoundError:
            pass
        else:
            logger.debug( "Discarded partially written file %s", self.path )
