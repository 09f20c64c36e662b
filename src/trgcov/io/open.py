from io import IOBase
from typing import Union, BinaryIO, Optional
from pathlib import Path
from importlib import import_module


# Classes --------------------------------------------------------------------------------------------------------------
class Xopen:
    """
    Opens plain or compressed files in binary mode.

    Compression is sniffed from magic bytes when reading and taken from the extension when
    writing. Paths are taken literally, ``-`` included.

    Examples:
        >>> with Xopen("genomes.fasta.gz") as f:
        ...     first = f.readline()
    """
    _MAGIC = {
        b'\x1f\x8b': 'gzip',
        b'\x42\x5a\x68': 'bz2',
        b'\xfd7zXZ\x00': 'lzma',
    }
    _EXT_TO_PKG = {'gz': 'gzip', 'bz2': 'bz2', 'xz': 'lzma'}
    _MIN_N_BYTES = max(len(i) for i in _MAGIC.keys())

    def __init__(self, file: Union[str, Path, BinaryIO], mode: str = 'rb'):
        """
        Initializes the Xopen context manager.

        Args:
            file: File path (str or Path) or an existing binary file object.
            mode: 'rb', 'wb' or 'ab'.
        """
        if mode not in {'rb', 'wb', 'ab'}: raise ValueError(f"Unsupported mode '{mode}', expected rb, wb or ab")
        self.file = file
        self.mode = mode
        self._handle: Optional[BinaryIO] = None
        self._raw: Optional[BinaryIO] = None
        self._close_on_exit = False

    def __enter__(self) -> BinaryIO:
        self._handle = self._open()
        return self._handle

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._close_on_exit: return
        if self._handle: self._handle.close()
        # Decompressors do not close the file object they wrap
        if self._raw and self._raw is not self._handle: self._raw.close()

    @staticmethod
    def _opener(pkg_name: str):
        return import_module(pkg_name).open

    def _open(self) -> BinaryIO:
        reading = self.mode == 'rb'
        if isinstance(self.file, IOBase): return self.file

        path = Path(self.file).expanduser()
        self._close_on_exit = True
        if not reading:
            if pkg := self._EXT_TO_PKG.get(path.suffix.lower().lstrip('.')):
                return self._opener(pkg)(path, mode=self.mode)
            return open(path, mode=self.mode)

        raw_stream = self._raw = open(path, mode='rb')
        start = raw_stream.read(self._MIN_N_BYTES)
        raw_stream.seek(0)
        for magic, pkg in self._MAGIC.items():
            if start.startswith(magic): return self._opener(pkg)(raw_stream, mode='rb')
        return raw_stream
