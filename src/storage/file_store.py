# -*- coding: utf-8 -*-
"""
File-based storage for per-branch KOC export files.

Each branch gets one ``<branchcode>.koc`` file under the output
directory.  Payload lines are appended as they arrive; the header is
written once the export run is complete.
"""

import os

from src.core.exceptions import StorageError, InvalidBranchCode

KOC_EXTENSION = ".koc"

DIR_PERMISSIONS = 0o755
FILE_PERMISSIONS = 0o644


def is_safe_branchcode(branchcode):
    """Branch codes become file names; reject anything that is not a
    single plain path component."""
    if not branchcode or branchcode in (os.curdir, os.pardir):
        return False
    if os.sep in branchcode or (os.altsep and os.altsep in branchcode):
        return False
    return "\0" not in branchcode


class KocFileStore:
    """Read/write branch KOC files in *output_dir*."""

    def __init__(self, output_dir=None, encoding="utf-8"):
        if output_dir is None:
            output_dir = os.getcwd()
        self._root = os.path.abspath(output_dir)
        self._encoding = encoding

    @property
    def root(self):
        return self._root

    def ensure_directory(self):
        if not os.path.isdir(self._root):
            try:
                os.makedirs(self._root)
                os.chmod(self._root, DIR_PERMISSIONS)
            except OSError as e:
                raise StorageError(f"cannot create output directory {self._root}: {e}")
            print(f"Created directory: {self._root}")

    def branch_path(self, branchcode):
        if not is_safe_branchcode(branchcode):
            raise InvalidBranchCode(branchcode)
        return os.path.join(self._root, branchcode + KOC_EXTENSION)

    def append_lines(self, branchcode, lines):
        """Append *lines* (without terminators) to the branch file."""
        dest = self.branch_path(branchcode)
        try:
            with open(dest, "a", encoding=self._encoding, newline="") as f:
                for line in lines:
                    f.write(line + "\n")
        except IOError as e:
            raise StorageError(f"failed to append to {dest}: {e}")
        return dest

    def read_lines(self, branchcode):
        """Lines of the branch file without terminators, or None if the
        file does not exist."""
        src = self.branch_path(branchcode)
        if not os.path.isfile(src):
            return None
        try:
            with open(src, "r", encoding=self._encoding, newline="") as f:
                return [line.rstrip("\r\n") for line in f]
        except IOError as e:
            raise StorageError(f"cannot read {src}: {e}")

    def write_header(self, branchcode, header, is_header):
        """Put *header* on the first line of the branch file.

        A first line that *is_header* accepts is replaced rather than
        kept, so repeated export runs into the same directory leave
        exactly one header at the top.
        """
        dest = self.branch_path(branchcode)
        lines = self.read_lines(branchcode) or []
        if lines and is_header(lines[0]):
            lines = lines[1:]
        tmp = dest + ".tmp"
        try:
            with open(tmp, "w", encoding=self._encoding, newline="") as f:
                f.write(header + "\n")
                for line in lines:
                    f.write(line + "\n")
            os.chmod(tmp, FILE_PERMISSIONS)
            os.replace(tmp, dest)
        except (IOError, OSError) as e:
            raise StorageError(f"failed to write header to {dest}: {e}")
        return dest
