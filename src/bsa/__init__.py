"""
bsa: read Bethesda BSA archives (Oblivion / Fallout 3 / New Vegas / Skyrim).

Format: header, folder records, per-folder file records, a file name table,
then file data.  File data may be zlib (v103/v104) or LZ4 (v105) compressed.
"""

from bsa.reader import BsaEntry, BsaError, BsaReader, list_bsa

__all__ = ["BsaEntry", "BsaError", "BsaReader", "list_bsa"]
