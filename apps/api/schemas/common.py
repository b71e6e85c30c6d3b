from typing import Annotated

from pydantic import Field

# Ids are stored as SQLite INTEGER, a signed 64-bit value.
RowId = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]
