# jewelry_api/repositories/code_sequence_repo.py
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from jewelry_api.models.code_sequence import CodeSequence
from jewelry_api.models.order import Order
from jewelry_api.models.product import Product


class CodeSequenceRepository:
    """
    Data access layer for code_sequences.

    NOTE:
      - No commits here; the allocator runs inside the caller's
        transaction so the code and the row that carries it are
        written together.
    """

    def increment(self, session: Session, family: str) -> int | None:
        """
        Atomically add 1 to the family counter and return the new value.

        A single UPDATE ... RETURNING statement: the row lock it takes
        makes concurrent allocators queue instead of reading the same
        pre-increment value.

        Returns None if the family row does not exist yet.
        """
        stmt = (
            update(CodeSequence)
            .where(CodeSequence.family == family)
            .values(
                current_sequence=CodeSequence.current_sequence + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(CodeSequence.current_sequence)
        )
        return session.exec(stmt).scalar_one_or_none()

    def create_if_missing(self, session: Session, family: str) -> None:
        """
        Insert a zeroed counter row for `family`.

        Runs in a savepoint so losing a creation race to another
        request only undoes this insert.
        """
        try:
            with session.begin_nested():
                session.add(CodeSequence(family=family, current_sequence=0))
        except IntegrityError:
            # another request created it first
            return

    # ---- Collision checks ----

    def product_code_exists(self, session: Session, code: str) -> bool:
        stmt = select(Product.id).where(Product.product_code == code).limit(1)
        return session.exec(stmt).first() is not None

    def order_code_exists(self, session: Session, code: str) -> bool:
        stmt = select(Order.id).where(Order.order_code == code).limit(1)
        return session.exec(stmt).first() is not None
