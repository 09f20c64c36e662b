"""
Module containing various utility functions and classes.
"""
from argparse import Namespace
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Union
import logging

from .resources import RESOURCES, WorkerPool, jit


# Constants ------------------------------------------------------------------------------------------------------------
TRACE = 5
"""Log level below DEBUG used for per-trigger output."""
logging.addLevelName(TRACE, "TRACE")


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass
class Config:
    """
    Config parent class that can conveniently set attributes from CLI args
    """

    @classmethod
    def from_args(cls, args: Namespace):
        """
        Sets attributes of the class from a Namespace object (e.g. from argparse)

        Parameters
        ----------
        args : :class:`argparse.Namespace`
            :class:`argparse.Namespace` object containing attributes to set

        Returns
        -------
        cls
            Class instance with attributes set from args

        """
        return cls(**{f.name: getattr(args, f.name) for f in fields(cls) if hasattr(args, f.name)})


# Functions ------------------------------------------------------------------------------------------------------------
def is_non_empty_file(file: Union[str, Path], min_size: int = 1) -> bool:
    """
    Checks if a file exists, is a file, and is non-empty (optionally above a minimum size).

    :param file: Path to the file to check.
    :param min_size: Minimum size of the file in bytes.
    :return: True if the file exists, is a file, and is non-empty, False otherwise.
    """
    if not isinstance(file, Path):
        file = Path(file)
    if file.exists() and file.is_file():
        return file.stat().st_size >= min_size
    else:
        return False
