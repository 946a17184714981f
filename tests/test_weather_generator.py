import unittest
import sys
import os
from datetime import date

# Adjust path to import from the root directory if tests is a top-level folder
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dice import DiceRoller
from event_ledger import EventLedger, InMemoryEventStore
from fakes import ScriptedRoller
from weather_generator import (
    WeatherGenerator,
    generate_weather,
    instantiate_duration,
    resolve_cold_snap_heat_wave,
)
from weather_tables import STRANGE, Season, get_season_table, get_strange_table

WINTER_DAY = date(2026, 1, 15)
SUMMER_DAY = date(2026, 7, 4)
FALL_DAY = date(2026, 10, 18)


class TestWeatherGenerator(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryEventStore()
        self.ledger = EventLedger(self.store, clock=lambda: WINTER_DAY)

    def make_generator(self, roller):
        return WeatherGenerator(ledger=self.ledger, roller=roller, clock=lambda: WINTER_DAY)

    def test_regular_weather_comes_from_season_table(self):
        roller = ScriptedRoller({6: [2, 3]})
        outcome = self.make_generator(roller).generate(FALL_DAY)
        table = get_season_table(Season.FALL)

        self.assertEqual(outcome.season, Season.FALL)
        self.assertEqual(outcome.temperature, table.temperature[1])
        self.assertEqual(outcome.condition, table.condition[2])
        self.assertIsNone(outcome.duration)
        self.assertEqual(roller.calls, [6, 6])
        self.assertEqual(self.store.records, [])

    def test_condition_roll_of_six_is_always_strange(self):
        generator = self.make_generator(ScriptedRoller(default=6))
        for _ in range(20):
            outcome = generator.generate(WINTER_DAY)
            self.assertNotEqual(outcome.condition, STRANGE)
            self.assertIsNotNone(outcome.duration)

    def test_strange_weather_roll_order(self):
        roller = ScriptedRoller({6: [1, 6, 2], 10: [2]})
        outcome = self.make_generator(roller).generate(WINTER_DAY)

        self.assertEqual(roller.calls, [6, 6, 10, 6])
        self.assertEqual(outcome.condition, "Ash Storm")
        self.assertEqual(outcome.duration, "2 x 10 Minutes")

    def test_cold_snap_on_a_cold_day(self):
        # Winter temperature roll 1 is "Cold (Around 35°F/2°C)", d10 roll 8 is Cold Snap/Heat Wave
        roller = ScriptedRoller({6: [1, 6, 3], 10: [8]})
        outcome = self.make_generator(roller).generate(WINTER_DAY)

        self.assertEqual(get_strange_table().conditions[7], "Cold Snap/Heat Wave")
        self.assertEqual(outcome.temperature, "Cold (Around 35°F/2°C)")
        self.assertEqual(outcome.condition, "Cold Snap")
        self.assertEqual(outcome.duration, "3 Days")

    def test_heat_wave_on_a_hot_day(self):
        # Summer temperature roll 6 is "Hot (Around 90°F/32°C)"
        roller = ScriptedRoller({6: [6, 6, 1], 10: [8]})
        outcome = self.make_generator(roller).generate(SUMMER_DAY)

        self.assertEqual(outcome.condition, "Heat Wave")
        self.assertEqual(outcome.duration, "1 Days")

    def test_resolve_cold_snap_heat_wave(self):
        self.assertEqual(resolve_cold_snap_heat_wave("Cold (Around 40°F/4°C)"), "Cold Snap")
        self.assertEqual(resolve_cold_snap_heat_wave("Cool (Around 50°F/10°C)"), "Cold Snap")
        self.assertEqual(resolve_cold_snap_heat_wave("Warm (Around 60°F/15°C)"), "Heat Wave")
        self.assertEqual(resolve_cold_snap_heat_wave("Hot (Around 80°F/27°C)"), "Heat Wave")

    def test_instantiate_duration(self):
        self.assertEqual(instantiate_duration("1d6 Days", 4), "4 Days")
        self.assertEqual(instantiate_duration("1d6 Hours", 6), "6 Hours")
        self.assertEqual(instantiate_duration("1d6 x 10 Minutes", 5), "5 x 10 Minutes")

    def test_multi_day_strange_weather_is_tracked(self):
        roller = ScriptedRoller({6: [1, 6, 3], 10: [8]})
        self.make_generator(roller).generate(WINTER_DAY)

        self.assertEqual(self.store.records, [{
            "condition": "Cold Snap",
            "originalDuration": "3 Days",
            "daysRemaining": 2,
            "startDate": WINTER_DAY.strftime("%a %b %d %Y"),
        }])

    def test_short_strange_weather_is_not_tracked(self):
        # Acid Rain lasts 1d6 hours
        roller = ScriptedRoller({6: [1, 6, 5], 10: [5]})
        outcome = self.make_generator(roller).generate(WINTER_DAY)

        self.assertEqual(outcome.condition, "Acid Rain")
        self.assertEqual(outcome.duration, "5 Hours")
        self.assertEqual(self.store.records, [])

    def test_generator_without_ledger(self):
        outcome = WeatherGenerator(roller=ScriptedRoller({6: [1, 6, 4], 10: [3]})).generate(WINTER_DAY)
        self.assertEqual(outcome.condition, "Flooding")
        self.assertEqual(outcome.duration, "4 Days")

    def test_seeded_generation_never_returns_sentinel(self):
        generator = WeatherGenerator(ledger=self.ledger, roller=DiceRoller.seeded(2047))
        for day in (WINTER_DAY, date(2026, 4, 1), SUMMER_DAY, FALL_DAY):
            for _ in range(100):
                outcome = generator.generate(day)
                self.assertNotEqual(outcome.condition, STRANGE)
                self.assertIn(outcome.temperature, get_season_table(outcome.season).temperature)

    def test_generate_weather_wrapper(self):
        outcome = generate_weather(roller=ScriptedRoller({6: [3, 1]}), today=SUMMER_DAY)
        self.assertEqual(outcome.temperature, "Warm (Around 70°F/21°C)")
        self.assertEqual(outcome.condition, "Light Rain")


if __name__ == '__main__':
    unittest.main()
