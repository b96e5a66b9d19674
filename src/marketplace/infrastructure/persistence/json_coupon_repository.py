"""JSON-file-backed implementation of CouponRepository.

Coupons are stored keyed by code.  Every write bumps ``version``; the
unit of work relies on that to detect concurrent redemptions.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from marketplace.domain.exceptions import ConcurrencyConflict
from marketplace.domain.model.coupon import Coupon, CouponKind, normalize_code
from marketplace.domain.model.value_objects import Money
from marketplace.domain.repository.coupon_repository import CouponRepository
from marketplace.infrastructure.persistence.json_file import JsonFile


class JsonCouponRepository(CouponRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path, empty={})

    @property
    def path(self) -> Path:
        return self._file.path

    # --- CouponRepository interface -------------------------------------------

    def get_by_code(self, code: str) -> Coupon | None:
        raw = self._file.load().get(normalize_code(code))
        return self._to_domain(raw) if raw is not None else None

    def save(self, coupon: Coupon) -> None:
        self.save_all([coupon])

    def save_all(self, coupons: list[Coupon]) -> None:
        """Compare-and-swap every coupon on its version, then write once.

        Raises:
            ConcurrencyConflict: a stored version differs from the one the
                coupon was read at, or a new coupon's code is taken.
        """
        stored = self._file.load()
        for coupon in coupons:
            current = stored.get(coupon.code)
            current_version = current["version"] if current is not None else 0
            if current_version != coupon.version:
                raise ConcurrencyConflict(
                    f"Coupon {coupon.code} changed concurrently "
                    f"(expected version {coupon.version}, found {current_version})"
                )
        for coupon in coupons:
            stored[coupon.code] = self._to_raw(coupon, coupon.version + 1)
        self._file.persist(stored)
        for coupon in coupons:
            coupon.version += 1

    def snapshot(self) -> dict:
        """The raw stored document, for restoring after a failed commit."""
        return self._file.load()

    def restore(self, document: dict) -> None:
        self._file.persist(document)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(coupon: Coupon, version: int) -> dict:
        return {
            "code": coupon.code,
            "kind": coupon.kind.value,
            "value": str(coupon.value),
            "expires_at": coupon.expires_at.isoformat(),
            "min_order_amount": str(coupon.min_order_amount.amount),
            "currency": coupon.min_order_amount.currency,
            "max_uses": coupon.max_uses,
            "uses_count": coupon.uses_count,
            "restricted_to_user_id": coupon.restricted_to_user_id,
            "used_by_user_ids": sorted(coupon.used_by_user_ids),
            "is_active": coupon.is_active,
            "version": version,
            "created_at": coupon.created_at.isoformat(),
            "updated_at": coupon.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Coupon:
        return Coupon(
            code=raw["code"],
            kind=CouponKind(raw["kind"]),
            value=Decimal(raw["value"]),
            expires_at=datetime.fromisoformat(raw["expires_at"]),
            min_order_amount=Money(Decimal(raw["min_order_amount"]), raw["currency"]),
            max_uses=raw["max_uses"],
            uses_count=raw["uses_count"],
            restricted_to_user_id=raw.get("restricted_to_user_id"),
            used_by_user_ids=set(raw.get("used_by_user_ids", [])),
            is_active=raw["is_active"],
            version=raw["version"],
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )
