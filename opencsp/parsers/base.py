"""
Parser base module - abstract base class for instance readers.

All parsers inherit from Parser and implement parse(), which reads a file
and returns a validated Instance.

Design Notes:
------------
- Parsers are stateless (no instance data beyond configuration)
- parse() returns an Instance, so validation errors surface as
  InvalidInstance / InfeasibleInstance
- Malformed files raise InvalidInstance as well
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from opencsp.core.instance import Instance

logger = logging.getLogger(__name__)


@dataclass
class ParserConfig:
    """
    Configuration options for parsers.

    Attributes:
        encoding: File encoding (default UTF-8)
        delimiter: Field delimiter for tabular formats
    """
    encoding: str = "utf-8"
    delimiter: str = ","


class Parser(ABC):
    """
    Abstract base class for instance parsers.

    Example:
        >>> class MyFormatParser(Parser):
        ...     def parse(self, path) -> Instance:
        ...         ...
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        """
        Initialize parser with configuration.

        Args:
            config: Parser configuration (uses defaults if None)
        """
        self.config = config or ParserConfig()

    @abstractmethod
    def parse(self, path: Union[str, Path]) -> Instance:
        """
        Parse a file and return an Instance.

        Args:
            path: Path to the instance file

        Returns:
            Validated Instance

        Raises:
            FileNotFoundError: If path doesn't exist
            InvalidInstance: If the file is malformed
        """
        pass

    def can_parse(self, path: Union[str, Path]) -> bool:
        """Check if this parser can handle the given path."""
        return Path(path).is_file()

    def get_format_name(self) -> str:
        """Return human-readable format name."""
        return self.__class__.__name__.replace("Parser", "")

    def _read_lines(self, path: Union[str, Path]) -> List[str]:
        """Read file lines with configured encoding, keeping line endings."""
        with open(path, 'r', encoding=self.config.encoding, newline='') as f:
            return f.readlines()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
