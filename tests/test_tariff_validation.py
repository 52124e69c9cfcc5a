import unittest

from core.errors import InvalidTariffConfiguration
from core.models import REGIME_NET_METERING, REGIME_SELF_CONSUMPTION, TariffConfig, TariffTier
from tariffs.defaults import default_tariff, default_utility, regime_for_utility, utility_names
from tariffs.validation import (
    add_tier,
    ensure_valid_tariff,
    remove_tier,
    tariff_problems,
    update_tier_upper_bound,
    validate_tariff,
)


def _tiers():
    return [
        TariffTier(0, 2000, 0.23),
        TariffTier(2001, 4000, 0.28),
        TariffTier(4001, 6000, 0.32),
        TariffTier(6001, None, 0.38),
    ]


class TestTariffValidation(unittest.TestCase):
    def test_valid_tiers_have_no_problems(self):
        self.assertEqual(tariff_problems(TariffConfig(tiers=_tiers())), [])
        validate_tariff(TariffConfig(tiers=_tiers()))

    def test_gap_between_tiers_is_rejected(self):
        tiers = _tiers()
        tiers[1] = TariffTier(2500, 4000, 0.28)
        with self.assertRaises(InvalidTariffConfiguration) as cm:
            validate_tariff(TariffConfig(tiers=tiers))
        self.assertTrue(any("contiguous" in p for p in cm.exception.problems))

    def test_missing_unbounded_tier_is_rejected(self):
        tiers = _tiers()[:-1]
        self.assertTrue(tariff_problems(TariffConfig(tiers=tiers)))

    def test_unbounded_tier_must_be_last(self):
        tiers = [TariffTier(0, None, 0.23), TariffTier(2001, 4000, 0.28)]
        problems = tariff_problems(TariffConfig(tiers=tiers))
        self.assertTrue(any("last" in p for p in problems))

    def test_empty_negative_and_bad_start(self):
        self.assertTrue(tariff_problems(TariffConfig(tiers=[])))
        self.assertTrue(tariff_problems(TariffConfig(tiers=[TariffTier(0, None, -0.1)])))
        self.assertTrue(tariff_problems(TariffConfig(tiers=[TariffTier(100, None, 0.2)])))

    def test_invalid_tariff_is_a_value_error(self):
        with self.assertRaises(ValueError):
            validate_tariff(TariffConfig(tiers=[]))

    def test_ensure_valid_tariff_keeps_valid_one(self):
        t = TariffConfig(tiers=_tiers(), fuel_surcharge_per_kwh=0.01)
        self.assertIs(ensure_valid_tariff(t, "DEWA"), t)

    def test_ensure_valid_tariff_falls_back_to_utility_default(self):
        broken = TariffConfig(tiers=[TariffTier(0, 100, 0.2)])
        with self.assertLogs("tariffs.validation", level="WARNING"):
            fixed = ensure_valid_tariff(broken, "EtihadWE")
        self.assertEqual(fixed, default_tariff("EtihadWE"))


class TestTierEditing(unittest.TestCase):
    def test_add_tier_splits_unbounded_tier(self):
        tiers = add_tier(_tiers())
        self.assertEqual(len(tiers), 5)
        self.assertEqual(tiers[3], TariffTier(6001, 8000, 0.38))
        self.assertEqual(tiers[4].from_kwh, 8001)
        self.assertIsNone(tiers[4].to_kwh)
        self.assertAlmostEqual(tiers[4].rate_per_kwh, 0.43)
        validate_tariff(TariffConfig(tiers=tiers))

    def test_add_tier_to_empty_list(self):
        tiers = add_tier([])
        validate_tariff(TariffConfig(tiers=tiers))

    def test_remove_last_tier_reopens_previous(self):
        tiers = remove_tier(_tiers(), 3)
        self.assertEqual(len(tiers), 3)
        self.assertIsNone(tiers[-1].to_kwh)
        validate_tariff(TariffConfig(tiers=tiers))

    def test_remove_inner_tier_restitches(self):
        tiers = remove_tier(_tiers(), 1)
        self.assertEqual(tiers[1].from_kwh, 2001)
        self.assertEqual(tiers[1].rate_per_kwh, 0.32)
        validate_tariff(TariffConfig(tiers=tiers))

    def test_remove_first_tier_starts_at_zero(self):
        tiers = remove_tier(_tiers(), 0)
        self.assertEqual(tiers[0].from_kwh, 0)
        validate_tariff(TariffConfig(tiers=tiers))

    def test_update_upper_bound_moves_next_tier(self):
        tiers = update_tier_upper_bound(_tiers(), 0, 2500)
        self.assertEqual(tiers[0].to_kwh, 2500)
        self.assertEqual(tiers[1].from_kwh, 2501)
        validate_tariff(TariffConfig(tiers=tiers))

    def test_update_upper_bound_rejects_last_tier(self):
        with self.assertRaises(ValueError):
            update_tier_upper_bound(_tiers(), 3, 8000)

    def test_update_upper_bound_cannot_swallow_next_tier(self):
        with self.assertRaises(ValueError):
            update_tier_upper_bound(_tiers(), 0, 5000)
        with self.assertRaises(ValueError):
            update_tier_upper_bound(_tiers(), 0, 4000)

    def test_update_upper_bound_cannot_end_before_start(self):
        with self.assertRaises(ValueError):
            update_tier_upper_bound(_tiers(), 1, 1500)

    def test_update_upper_bound_limits_keep_tariff_valid(self):
        tiers = update_tier_upper_bound(_tiers(), 1, 5999)
        self.assertEqual(tiers[2], TariffTier(6000, 6000, 0.32))
        validate_tariff(TariffConfig(tiers=tiers))
        tiers = update_tier_upper_bound(_tiers(), 1, 2001)
        self.assertEqual(tiers[1].to_kwh, 2001)
        validate_tariff(TariffConfig(tiers=tiers))

    def test_bad_index(self):
        with self.assertRaises(IndexError):
            remove_tier(_tiers(), 4)
        with self.assertRaises(IndexError):
            update_tier_upper_bound(_tiers(), -1, 100)


class TestDefaultTariffs(unittest.TestCase):
    def test_utilities(self):
        names = utility_names()
        self.assertIn("DEWA", names)
        self.assertIn("EtihadWE", names)
        self.assertEqual(default_utility(), "DEWA")

    def test_regimes(self):
        self.assertEqual(regime_for_utility("DEWA"), REGIME_NET_METERING)
        self.assertEqual(regime_for_utility("EtihadWE"), REGIME_SELF_CONSUMPTION)

    def test_default_tariffs_are_valid(self):
        for name in utility_names():
            validate_tariff(default_tariff(name))
        self.assertAlmostEqual(default_tariff("DEWA").fuel_surcharge_per_kwh, 0.06)
        self.assertAlmostEqual(default_tariff("EtihadWE").fuel_surcharge_per_kwh, 0.05)

    def test_unknown_utility_uses_default(self):
        self.assertEqual(default_tariff("Nowhere Power"), default_tariff("DEWA"))


if __name__ == "__main__":
    unittest.main()
