import math
import unittest

from core.models import (
    BATTERY_NIGHT_BACKUP,
    BATTERY_STORE_UNUSED,
    REGIME_NET_METERING,
    REGIME_SELF_CONSUMPTION,
    BatteryConfig,
    SystemConfig,
)
from energy.production import total_efficiency_factor
from energy.sizing import (
    area_per_panel,
    battery_capacity_for,
    panel_count_for,
    size_system,
    target_annual_production,
)


FLAT = [1000.0] * 12


class TestTargetPolicy(unittest.TestCase):
    def test_net_metering_covers_annual_load(self):
        t = target_annual_production(12000, REGIME_NET_METERING, SystemConfig(), BatteryConfig())
        self.assertAlmostEqual(t, 12000)

    def test_self_consumption_without_battery_covers_daytime(self):
        t = target_annual_production(12000, REGIME_SELF_CONSUMPTION, SystemConfig(), BatteryConfig())
        self.assertAlmostEqual(t, 12000 * 0.55)

    def test_self_consumption_with_night_backup_covers_annual(self):
        b = BatteryConfig(enabled=True, mode=BATTERY_NIGHT_BACKUP)
        t = target_annual_production(12000, REGIME_SELF_CONSUMPTION, SystemConfig(), b)
        self.assertAlmostEqual(t, 12000)

    def test_self_consumption_with_store_unused_covers_daytime(self):
        b = BatteryConfig(enabled=True, mode=BATTERY_STORE_UNUSED)
        t = target_annual_production(12000, REGIME_SELF_CONSUMPTION, SystemConfig(), b)
        self.assertAlmostEqual(t, 12000 * 0.55)


class TestPanelsAndArea(unittest.TestCase):
    def test_panel_count_rounds_up(self):
        self.assertEqual(panel_count_for(6.1, 610), 10)
        self.assertEqual(panel_count_for(6.11, 610), 11)
        self.assertEqual(panel_count_for(0.0, 610), 1)

    def test_invalid_panel_wattage(self):
        with self.assertRaises(ValueError):
            panel_count_for(5.0, 0)

    def test_area_per_panel(self):
        self.assertAlmostEqual(area_per_panel("portrait"), 2.172 * 1.134 * 1.20)
        self.assertAlmostEqual(area_per_panel("landscape"), 2.172 * 1.134 * 1.25)
        self.assertAlmostEqual(area_per_panel("portrait", {"length_m": 2.0, "width_m": 1.0}), 2.4)


class TestSizeSystem(unittest.TestCase):
    def test_net_metering_sizing(self):
        s = SystemConfig()
        r = size_system(FLAT, "Dubai", REGIME_NET_METERING, s, BatteryConfig())

        ideal = 12000 / (5.5 * 365 * total_efficiency_factor(s))
        n = math.ceil(ideal * 1000 / 610)
        self.assertAlmostEqual(r.ideal_size_kwp, ideal, places=9)
        self.assertEqual(r.panel_count, n)
        self.assertAlmostEqual(r.actual_system_size_kwp, n * 0.61, places=9)
        self.assertAlmostEqual(r.inverter_capacity_kw, n * 0.61 * 1.1, places=9)
        self.assertAlmostEqual(r.area_required_m2, n * area_per_panel("portrait"), places=9)
        self.assertEqual(len(r.monthly_production_kwh), 12)
        self.assertAlmostEqual(r.annual_production_kwh, sum(r.monthly_production_kwh), places=6)
        self.assertEqual(r.battery_capacity_kwh, 0.0)
        self.assertEqual(r.unused_solar_kwh, 0.0)

    def test_net_metering_sizes_no_battery(self):
        for mode in (BATTERY_NIGHT_BACKUP, BATTERY_STORE_UNUSED):
            b = BatteryConfig(enabled=True, mode=mode)
            r = size_system(FLAT, "Dubai", REGIME_NET_METERING, SystemConfig(), b)
            self.assertEqual(r.battery_capacity_kwh, 0.0)

    def test_area_advisory(self):
        s = SystemConfig(available_area_m2=10.0)
        r = size_system(FLAT, "Dubai", REGIME_NET_METERING, s, BatteryConfig())
        self.assertTrue(r.exceeds_available_area)
        self.assertTrue(any("exceeds available" in a for a in r.advisories))

    def test_self_consumption_reports_unused_solar(self):
        r = size_system(FLAT, "Dubai", REGIME_SELF_CONSUMPTION, SystemConfig(), BatteryConfig())
        self.assertGreater(r.unused_solar_kwh, 0.0)
        self.assertTrue(any("lost without a battery" in a for a in r.advisories))

    def test_night_backup_battery_capacity(self):
        b = BatteryConfig(enabled=True, mode=BATTERY_NIGHT_BACKUP)
        r = size_system(FLAT, "Dubai", REGIME_SELF_CONSUMPTION, SystemConfig(), b)
        expected = math.ceil(12000 * 0.45 / 365 / (0.9 * 0.95))
        self.assertEqual(r.battery_capacity_kwh, float(expected))

    def test_store_unused_battery_capacity_follows_worst_month(self):
        b = BatteryConfig(enabled=True, mode=BATTERY_STORE_UNUSED)
        prod = [600.0] * 12
        prod[6] = 1000.0
        cap = battery_capacity_for(FLAT, prod, SystemConfig(), b)
        self.assertEqual(cap, float(math.ceil((1000 - 550) / 31 / (0.9 * 0.95))))

    def test_fixed_battery_capacity_overrides_sizing(self):
        b = BatteryConfig(enabled=True, capacity_kwh=10.0)
        self.assertEqual(battery_capacity_for(FLAT, FLAT, SystemConfig(), b), 10.0)

    def test_requires_twelve_months(self):
        with self.assertRaises(ValueError):
            size_system([1000.0] * 11, "Dubai", REGIME_NET_METERING, SystemConfig(), BatteryConfig())


if __name__ == "__main__":
    unittest.main()
