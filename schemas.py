# schemas.py
"""Data validation schemas for the conservancy boundary collection."""

import pandera.pandas as pa

from config import REGION_NAME_FIELD

# Rows whose name is present but not text are dropped rather than failing the
# whole collection. Missing names are allowed here and filtered out later.
region_properties_schema = pa.DataFrameSchema(
    {
        REGION_NAME_FIELD: pa.Column(
            nullable=True,
            checks=pa.Check(lambda value: isinstance(value, str), element_wise=True),
        ),
        "geometry": pa.Column(nullable=True),
    },
    strict=False,
    drop_invalid_rows=True,
)
