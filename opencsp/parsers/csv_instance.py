"""
CSV instance format.

One row per item type, row order defines the item index:

    Item,StockLength,Length,Demand
    1,10,3,5
    2,10,4,3

Required columns: StockLength (same value on every row), Length, Demand.
Any other column (such as Item) is ignored. Column names are matched
case-insensitively.
"""

import csv
import logging
from pathlib import Path
from typing import Optional, Union

from opencsp.core.instance import Instance
from opencsp.exceptions import InvalidInstance
from opencsp.parsers.base import Parser, ParserConfig

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("StockLength", "Length", "Demand")


def _parse_int(value: str, column: str, row: int) -> int:
    text = (value or "").strip()
    try:
        return int(text)
    except ValueError:
        try:
            number = float(text)
        except ValueError:
            raise InvalidInstance(f"Row {row}: {column} is not a number ({value!r})")
        if not number.is_integer():
            raise InvalidInstance(f"Row {row}: {column} must be an integer ({value!r})")
        return int(number)


class CSVInstanceParser(Parser):
    """
    Parser for CSV instance files.

    Example:
        >>> parser = CSVInstanceParser()
        >>> instance = parser.parse("instances/small.csv")
        >>> instance.stock_length
        10
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        super().__init__(config)

    def can_parse(self, path: Union[str, Path]) -> bool:
        path = Path(path)
        return path.is_file() and path.suffix.lower() == ".csv"

    def parse(self, path: Union[str, Path]) -> Instance:
        """
        Read an instance from a CSV file.

        Args:
            path: Path to the CSV file

        Returns:
            Validated Instance named after the file stem

        Raises:
            FileNotFoundError: If the file doesn't exist
            InvalidInstance: On missing columns, non-integer values,
                inconsistent StockLength or no rows
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Instance file not found: {path}")

        reader = csv.DictReader(
            self._read_lines(path),
            delimiter=self.config.delimiter,
        )
        if reader.fieldnames is None:
            raise InvalidInstance(f"{path}: empty file")

        columns = {name.strip().lower(): name for name in reader.fieldnames if name}
        missing = [c for c in REQUIRED_COLUMNS if c.lower() not in columns]
        if missing:
            raise InvalidInstance(f"{path}: missing columns {missing}")

        stock_col = columns["stocklength"]
        length_col = columns["length"]
        demand_col = columns["demand"]

        stock_length = None
        lengths = []
        demands = []

        # Header is line 1
        for row_num, row in enumerate(reader, start=2):
            if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
                continue
            row_stock = _parse_int(row.get(stock_col), "StockLength", row_num)
            if stock_length is None:
                stock_length = row_stock
            elif row_stock != stock_length:
                raise InvalidInstance(
                    f"{path}: row {row_num} has StockLength {row_stock}, "
                    f"expected {stock_length}"
                )
            lengths.append(_parse_int(row.get(length_col), "Length", row_num))
            demands.append(_parse_int(row.get(demand_col), "Demand", row_num))

        if stock_length is None:
            raise InvalidInstance(f"{path}: no item rows")

        logger.debug("Read %d item types from %s", len(lengths), path)

        return Instance(stock_length, tuple(lengths), tuple(demands), name=path.stem)


def write_instance_csv(
    instance: Instance,
    path: Union[str, Path],
    encoding: str = "utf-8",
) -> Path:
    """
    Write an instance in the CSV format read by CSVInstanceParser.

    Args:
        instance: Instance to write
        path: Output file path
        encoding: File encoding

    Returns:
        The path written
    """
    path = Path(path)
    with open(path, 'w', encoding=encoding, newline='') as f:
        writer = csv.writer(f)
        writer.writerow(["Item", "StockLength", "Length", "Demand"])
        for i, (length, demand) in enumerate(zip(instance.item_lengths, instance.item_demands)):
            writer.writerow([i + 1, instance.stock_length, length, demand])
    logger.debug("Wrote %d item types to %s", instance.num_items, path)
    return path
