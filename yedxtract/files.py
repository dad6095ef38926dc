"""
File access helpers for yedxtract.
"""

import hashlib
import logging
from pathlib import Path
from typing import NamedTuple, Optional, Union

from .config import config


class SourceFile(NamedTuple):
    data: str
    hash: str


def hash_content(data: str, algorithm: Optional[str] = None) -> str:
    """
    Calculate the hex digest of text content.

    Args:
        data: Text to hash, encoded as UTF-8
        algorithm: hashlib algorithm name (default from config)
    """
    return hashlib.new(algorithm or config.hash_algorithm, data.encode('utf-8')).hexdigest()


def read_file(filename: Union[str, Path]) -> SourceFile:
    """
    Read a text file together with the hash of its content.

    Args:
        filename: Path of the file

    Returns:
        File content and its hash
    """
    with open(filename, 'r', encoding='utf-8') as f:
        data = f.read()

    logging.debug(f"Read {len(data)} characters from {filename}")
    return SourceFile(data=data, hash=hash_content(data))
