"""
Parsers module - instance file readers and writers.

Available Parsers:
-----------------
- Parser: Abstract base class for custom parsers
- CSVInstanceParser: StockLength/Length/Demand CSV files

Usage:
------
>>> from opencsp.parsers import CSVInstanceParser
>>>
>>> instance = CSVInstanceParser().parse("path/to/instance.csv")
>>> print(instance.summary())
"""

from opencsp.parsers.base import Parser, ParserConfig
from opencsp.parsers.csv_instance import CSVInstanceParser, write_instance_csv

__all__ = [
    "Parser",
    "ParserConfig",
    "CSVInstanceParser",
    "write_instance_csv",
]
