import unittest

from core.models import Escalation, TariffConfig, TariffTier
from tariffs.engine import (
    bill_amount,
    bill_breakdown,
    escalation_factor,
    marginal_rate,
    tier_capacity,
    top_tier_rate,
)


def _dewa_like(fuel: float = 0.06, fixed: float = 0.0) -> TariffConfig:
    return TariffConfig(
        tiers=[
            TariffTier(1, 2000, 0.23),
            TariffTier(2001, 4000, 0.28),
            TariffTier(4001, 6000, 0.32),
            TariffTier(6001, None, 0.38),
        ],
        fuel_surcharge_per_kwh=fuel,
        fixed_monthly_charge=fixed,
    )


class TestTariffEngine(unittest.TestCase):
    def test_bill_5000_kwh_across_three_tiers(self):
        # 2000*0.23 + 2000*0.28 + 1000*0.32 + 5000*0.06
        self.assertAlmostEqual(bill_amount(5000, _dewa_like()), 1640.0, places=6)

    def test_breakdown_parts_add_up(self):
        b = bill_breakdown(5000, _dewa_like(fixed=25.0))
        self.assertAlmostEqual(b.energy, 1340.0, places=6)
        self.assertAlmostEqual(b.fuel_surcharge, 300.0, places=6)
        self.assertAlmostEqual(b.fixed_charge, 25.0, places=6)
        self.assertAlmostEqual(b.total, 1665.0, places=6)

    def test_tier_capacity(self):
        self.assertEqual(tier_capacity(TariffTier(0, 2000, 0.23)), 2000)
        self.assertEqual(tier_capacity(TariffTier(1, 2000, 0.23)), 2000)
        self.assertEqual(tier_capacity(TariffTier(2001, 4000, 0.28)), 2000)
        self.assertIsNone(tier_capacity(TariffTier(6001, None, 0.38)))

    def test_bill_is_monotonic_in_consumption(self):
        tariff = _dewa_like(fixed=10.0)
        prev = bill_amount(0, tariff)
        for c in range(250, 12001, 250):
            cur = bill_amount(c, tariff)
            self.assertGreaterEqual(cur, prev)
            prev = cur

    def test_non_positive_consumption_bills_fixed_charge_only(self):
        tariff = _dewa_like(fixed=30.0)
        self.assertAlmostEqual(bill_amount(0, tariff), 30.0)
        self.assertAlmostEqual(bill_amount(-50, tariff), 30.0)

    def test_unbounded_tier_takes_the_rest(self):
        tariff = _dewa_like(fuel=0.0)
        expected = 2000 * 0.23 + 2000 * 0.28 + 2000 * 0.32 + 4000 * 0.38
        self.assertAlmostEqual(bill_amount(10000, tariff), expected, places=6)

    def test_escalation_scales_rates_not_fixed_charge(self):
        tariff = _dewa_like(fixed=20.0)
        esc = Escalation(year=3, rate=0.1, escalate_fuel_surcharge=False)
        b = bill_breakdown(1000, tariff, esc)
        self.assertAlmostEqual(b.energy, 1000 * 0.23 * 1.21, places=6)
        self.assertAlmostEqual(b.fuel_surcharge, 1000 * 0.06, places=6)
        self.assertAlmostEqual(b.fixed_charge, 20.0, places=6)

    def test_fuel_surcharge_escalates_when_enabled(self):
        esc = Escalation(year=3, rate=0.1, escalate_fuel_surcharge=True)
        b = bill_breakdown(1000, _dewa_like(), esc)
        self.assertAlmostEqual(b.fuel_surcharge, 1000 * 0.06 * 1.21, places=6)

    def test_escalation_factor(self):
        self.assertEqual(escalation_factor(1, 0.05), 1.0)
        self.assertAlmostEqual(escalation_factor(2, 0.05), 1.05)
        self.assertAlmostEqual(escalation_factor(3, 0.05), 1.1025)

    def test_marginal_rate(self):
        tariff = _dewa_like()
        self.assertEqual(marginal_rate(0, tariff), 0.23)
        self.assertEqual(marginal_rate(2000, tariff), 0.23)
        self.assertEqual(marginal_rate(2001, tariff), 0.28)
        self.assertEqual(marginal_rate(5999, tariff), 0.32)
        self.assertEqual(marginal_rate(25000, tariff), 0.38)
        self.assertEqual(top_tier_rate(tariff), 0.38)

    def test_marginal_rate_without_tiers(self):
        self.assertEqual(marginal_rate(100, TariffConfig(tiers=[])), 0.0)


if __name__ == "__main__":
    unittest.main()
