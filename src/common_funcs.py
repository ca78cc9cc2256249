import gzip
import lzma
import sys

from typing import Callable


def xprint(*args, **kwargs) -> None:
    if "flush" not in kwargs:
        kwargs["flush"] = True

    if "file" not in kwargs:
        kwargs["file"] = sys.stderr

    print(*args, **kwargs)


def get_opener_for_file(fname: str) -> Callable:
    opener: Callable = open
    if fname.endswith(".gz"):
        opener = gzip.open
    elif fname.endswith((".xz", ".lzma")):
        opener = lzma.open
    return opener


def read_file_bytes(fname: str) -> bytes:
    opener = get_opener_for_file(fname)
    with opener(fname, "rb") as reader:
        return reader.read()


def write_output(data: bytes, outfile: str) -> None:
    opener = get_opener_for_file(outfile)
    with opener(outfile, "wb") as writer:
        writer.write(data)
