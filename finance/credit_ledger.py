# finance/credit_ledger.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Tuple

from core.models import Escalation, TariffConfig
from tariffs.engine import escalation_factor, top_tier_rate


@dataclass
class CreditLedgerEntry:
    origin_month_index: int      # year_index * 12 + month_index
    kwh_remaining: float


@dataclass(frozen=True)
class MonthSettlement:
    month_index: int
    production_kwh: float
    self_consumed_kwh: float
    exported_kwh: float
    deficit_kwh: float
    expired_kwh: float
    drawn_kwh: float
    residual_deficit_kwh: float
    ledger_before_kwh: float
    ledger_after_kwh: float


class NetMeteringCreditLedger:
    """
    Export credits banked as kWh, consumed oldest-first and forfeited once
    `credit_expiry_months` old. Months must be settled in chronological order.
    """

    def __init__(self, credit_expiry_months: int = 12, same_month_credit: bool = True):
        self.credit_expiry_months = int(credit_expiry_months)
        self.same_month_credit = bool(same_month_credit)
        self._entries: Deque[CreditLedgerEntry] = deque()
        self._last_month: Optional[int] = None

    # ------------------------------------------
    # Queries
    # ------------------------------------------
    @property
    def total_kwh(self) -> float:
        return float(sum(e.kwh_remaining for e in self._entries))

    @property
    def entries(self) -> Tuple[CreditLedgerEntry, ...]:
        return tuple(CreditLedgerEntry(e.origin_month_index, e.kwh_remaining) for e in self._entries)

    def rollover_value(self, tariff: TariffConfig, escalation: Optional[Escalation] = None) -> float:
        """Remaining credit valued at the (escalated) top-tier rate."""
        rate = top_tier_rate(tariff)
        if escalation is not None:
            rate *= escalation_factor(escalation.year, escalation.rate)
        return self.total_kwh * rate

    # ------------------------------------------
    # Monthly settlement
    # ------------------------------------------
    def settle_month(
        self,
        month_index: int,
        production_kwh: float,
        daytime_load_kwh: float,
        nighttime_load_kwh: float,
    ) -> MonthSettlement:
        if self._last_month is not None and month_index <= self._last_month:
            raise ValueError(
                f"months must be settled in order (got {month_index} after {self._last_month})"
            )
        self._last_month = int(month_index)

        prod = max(0.0, float(production_kwh))
        day = max(0.0, float(daytime_load_kwh))
        night = max(0.0, float(nighttime_load_kwh))
        before = self.total_kwh

        self_consumed = min(prod, day)
        exported = max(0.0, prod - day)
        deficit = night + max(0.0, day - prod)

        if self.same_month_credit:
            self._push(month_index, exported)
            expired = self._expire(month_index)
            drawn = self._draw(deficit)
        else:
            expired = self._expire(month_index)
            drawn = self._draw(deficit)
            self._push(month_index, exported)

        return MonthSettlement(
            month_index=int(month_index),
            production_kwh=prod,
            self_consumed_kwh=self_consumed,
            exported_kwh=exported,
            deficit_kwh=deficit,
            expired_kwh=expired,
            drawn_kwh=drawn,
            residual_deficit_kwh=max(0.0, deficit - drawn),
            ledger_before_kwh=before,
            ledger_after_kwh=self.total_kwh,
        )

    # ------------------------------------------
    # Internals
    # ------------------------------------------
    def _push(self, month_index: int, kwh: float) -> None:
        if kwh > 0:
            self._entries.append(CreditLedgerEntry(int(month_index), float(kwh)))

    def _expire(self, month_index: int) -> float:
        expired = 0.0
        kept: Deque[CreditLedgerEntry] = deque()
        for e in self._entries:
            if month_index - e.origin_month_index >= self.credit_expiry_months:
                expired += e.kwh_remaining
            else:
                kept.append(e)
        self._entries = kept
        return expired

    def _draw(self, kwh_needed: float) -> float:
        need = max(0.0, float(kwh_needed))
        drawn = 0.0
        while need > 0 and self._entries:
            head = self._entries[0]
            take = min(need, head.kwh_remaining)
            head.kwh_remaining -= take
            drawn += take
            need -= take
            if head.kwh_remaining <= 0:
                self._entries.popleft()
        return drawn
