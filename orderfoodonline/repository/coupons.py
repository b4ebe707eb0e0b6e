"""MongoDB lookup of coupon codes."""

from __future__ import annotations

from contextlib import closing
from itertools import islice

from pymongo.errors import PyMongoError

from orderfoodonline.repository.base import CouponRepository, Repository

_INDEX_NAME = "coupon_code_file_name_active_idx"
_INDEX_TIMEOUT_MS = 10_000


class MongoCouponRepository(CouponRepository):
    """Checks coupon codes against the ``coupons`` collection."""

    def __init__(self, repository: Repository):
        self._collection = repository.collection("coupons")
        self._create_index()

    def _create_index(self) -> None:
        self._collection.create_index(
            [("coupon_code", 1), ("file_name", 1)],
            partialFilterExpression={"isactive": True},
            name=_INDEX_NAME,
            maxTimeMS=_INDEX_TIMEOUT_MS,
        )

    def validate_coupon_code(self, coupon_code: str) -> bool:
        """Return True if the active code appears in at least two distinct files."""
        pipeline = [
            {"$match": {"coupon_code": coupon_code, "isactive": True}},
            {"$group": {"_id": "$file_name"}},
            {"$limit": 2},
        ]
        try:
            cursor = self._collection.aggregate(pipeline)
        except PyMongoError as exc:
            raise RuntimeError(f"aggregation error: {exc}") from exc

        with closing(cursor):
            try:
                distinct_files = sum(1 for _ in islice(cursor, 2))
            except PyMongoError as exc:
                raise RuntimeError(f"cursor error: {exc}") from exc
        return distinct_files >= 2