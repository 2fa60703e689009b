# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd


def records_to_dataframe(records: Iterable[Any], columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Build a DataFrame from records, one row per record and one column per logical key.

    :param records: :class:`~dataverse_schema.models.record.Record` objects or plain dicts.
    :param columns: Column order; defaults to the keys of the first record.
    """
    rows = [r.to_dict() if hasattr(r, "to_dict") else dict(r) for r in records]
    return pd.DataFrame(rows, columns=list(columns) if columns is not None else None)


def dataframe_to_records(df: pd.DataFrame, na_as_null: bool = False) -> List[Dict[str, Any]]:
    """Convert a DataFrame to a list of dicts, converting Timestamps to datetimes.

    :param df: Input DataFrame.
    :param na_as_null: When False (default), missing values are omitted from each dict,
        so saves leave those properties untouched. When True, missing values are
        included as None (clearing the field).
    """
    records = []
    for row in df.to_dict(orient="records"):
        clean = {}
        for k, v in row.items():
            if isinstance(v, (list, dict)) or pd.notna(v):
                clean[k] = v.to_pydatetime() if isinstance(v, pd.Timestamp) else v
            elif na_as_null:
                clean[k] = None
        records.append(clean)
    return records
