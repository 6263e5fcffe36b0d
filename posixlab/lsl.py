"""Print one file's details in the style of a long directory listing."""

from __future__ import annotations

import grp
import os
import pwd
import stat
import sys
import time
from collections.abc import Sequence

_TYPE_CHARS = {
    stat.S_IFLNK: "l",
    stat.S_IFDIR: "d",
    stat.S_IFREG: "-",
    stat.S_IFBLK: "b",
    stat.S_IFCHR: "c",
    stat.S_IFSOCK: "s",
    stat.S_IFIFO: "p",
}

_PERMISSION_BITS = (
    (stat.S_IRUSR, "r"),
    (stat.S_IWUSR, "w"),
    (stat.S_IXUSR, "x"),
    (stat.S_IRGRP, "r"),
    (stat.S_IWGRP, "w"),
    (stat.S_IXGRP, "x"),
    (stat.S_IROTH, "r"),
    (stat.S_IWOTH, "w"),
    (stat.S_IXOTH, "x"),
)


def file_type_char(mode: int) -> str:
    """Return the one-character file type for a mode, '?' when unknown."""
    return _TYPE_CHARS.get(stat.S_IFMT(mode), "?")


def permission_string(mode: int) -> str:
    """Return the ten-character type and permission string for a mode."""
    bits = "".join(char if mode & bit else "-" for bit, char in _PERMISSION_BITS)
    return file_type_char(mode) + bits


def long_listing(path: str | os.PathLike[str]) -> str:
    """Return the long-listing line for a path (links are followed).

    Raises OSError when the path cannot be examined and KeyError when its
    owner or group has no name.
    """
    st = os.stat(path)
    user = pwd.getpwuid(st.st_uid).pw_name
    group = grp.getgrgid(st.st_gid).gr_name
    mtime = time.ctime(st.st_mtime)
    return (
        f"{permission_string(st.st_mode)} {st.st_nlink} {user} {group} "
        f"{st.st_size} {mtime} {os.fspath(path)}"
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Print the long listing of the file named by the first argument."""
    args = list(sys.argv if argv is None else argv)
    if len(args) < 2:
        print(f"{args[0] if args else 'lsl'} filename")
        return -1
    try:
        line = long_listing(args[1])
    except OSError as exc:
        print(f"stat: {exc.strerror}", file=sys.stderr)
        return -1
    print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())