# jewelry_api/models/code_sequence.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class CodeSequence(SQLModel, table=True):
    """
    Last issued sequence number for one code family.

    Families:
      - "chain"           -> CH001, CH002, ...
      - "bracelet-anklet" -> BR001, ...
      - "order"           -> ORD001, ...

    Only CodeAllocator may change current_sequence.
    """

    __tablename__ = "code_sequences"

    family: str = Field(
        primary_key=True,
        max_length=30,
    )

    current_sequence: int = Field(
        default=0,
        ge=0,
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
