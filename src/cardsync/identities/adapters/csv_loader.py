"""CSV input loader adapter.

This adapter implements IInputLoader to read the login/tid mapping file.
"""

import csv
import logging
from pathlib import Path
from typing import Union

from ...api.exceptions import InputError, InputFileNotFoundError, SchemaError
from ..domain.entities import InputRow
from ..domain.ports import IInputLoader

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["login", "tid"]


class CsvInputLoader(IInputLoader):
    """CSV loader using the standard ``csv`` module.

    Expected CSV format:
    | login | tid      |
    |-------|----------|
    | jdoe1 | 1a2b3c4d |

    - First row is the header
    - The header must hold exactly the columns ``login`` and ``tid``,
      spelled verbatim (no surrounding whitespace)
    - By default the column order is free and values are read by name;
      with ``strict_column_order`` the header must be ``login,tid``
    - Cell values are returned verbatim (no trimming, no case changes)
    """

    def __init__(self, strict_column_order: bool = False):
        self.strict_column_order = strict_column_order

    def load(self, path: Union[str, Path]) -> list[InputRow]:
        """Read all data rows.

        Args:
            path: Path to the CSV file

        Returns:
            List of InputRow in file order

        Raises:
            InputFileNotFoundError: If the file is missing or unreadable
            SchemaError: If the header does not match the required columns
            InputError: If the file is not UTF-8 text or not valid CSV
        """
        path = Path(path)
        if not path.is_file():
            raise InputFileNotFoundError(str(path))

        try:
            with path.open(newline="", encoding="utf-8-sig") as handle:
                reader = csv.reader(handle)
                header = next(reader, None)
                if header is None:
                    raise SchemaError(
                        "CSV file is empty; expected a header row",
                        expected=REQUIRED_COLUMNS,
                        actual=[],
                        path=str(path),
                    )

                login_col, tid_col = self._resolve_columns(header, path)
                rows = []
                for record in reader:
                    # csv yields [] for blank lines
                    if not record:
                        continue
                    rows.append(
                        InputRow(
                            login=record[login_col] if login_col < len(record) else "",
                            tid=record[tid_col] if tid_col < len(record) else "",
                            row_number=len(rows) + 1,
                        )
                    )
        except OSError as e:
            raise InputFileNotFoundError(str(path), cause=e)
        except UnicodeDecodeError as e:
            raise InputError(
                "Input file is not UTF-8 text",
                path=str(path),
                code="INPUT_DECODE_ERROR",
                cause=e,
            )
        except csv.Error as e:
            raise InputError(
                f"Malformed CSV: {e}",
                path=str(path),
                code="INPUT_PARSE_ERROR",
                cause=e,
            )

        logger.info(f"Parsed {len(rows)} rows from {path}")
        return rows

    def _resolve_columns(self, header: list[str], path: Path) -> tuple[int, int]:
        """Return the indices of the login and tid columns.

        Raises:
            SchemaError: If the header does not match the required columns
        """
        # Compared verbatim; utf-8-sig has already removed any BOM.
        columns = list(header)

        if self.strict_column_order:
            matches = columns == REQUIRED_COLUMNS
        else:
            matches = len(columns) == len(REQUIRED_COLUMNS) and set(columns) == set(REQUIRED_COLUMNS)

        if not matches:
            order_note = " in this order" if self.strict_column_order else ""
            raise SchemaError(
                f"CSV columns must be exactly {', '.join(REQUIRED_COLUMNS)}{order_note}",
                expected=REQUIRED_COLUMNS,
                actual=columns,
                path=str(path),
            )

        return columns.index("login"), columns.index("tid")
