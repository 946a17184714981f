import unittest
import sys
import os
from datetime import date, time

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from event_ledger import OngoingEvent
from weather_generator import WeatherOutcome
from weather_report import (
    CONDITION_EFFECTS,
    EMERGENCY_BROADCASTS,
    FIELD_VALUE_LIMIT,
    REPORT_TITLE,
    SEVERITY_COLORS,
    STANDING_BULLETIN_TITLE,
    Severity,
    classify_severity,
    format_broadcast_date,
    mechanical_effects,
    render_help,
    render_report,
    split_field_value,
)
from weather_tables import Season, get_strange_table

TODAY = date(2026, 10, 18)


def outcome(condition="Clear", temperature="Warm (Around 60°F/15°C)", duration=None, season=Season.FALL):
    return WeatherOutcome(temperature=temperature, condition=condition, duration=duration, season=season)


def field_names(report):
    return [f.name for f in report.fields]


class TestSeverity(unittest.TestCase):

    def test_strange_conditions_have_their_colour(self):
        self.assertEqual(classify_severity("Blood Rain"), Severity.BLOOD)
        self.assertEqual(classify_severity("Acid Rain"), Severity.CORROSIVE)
        self.assertEqual(classify_severity("Ash Storm"), Severity.STORM)
        self.assertEqual(classify_severity("Dust Storm"), Severity.STORM)
        self.assertEqual(classify_severity("Radioactive Windstorm"), Severity.RADIOACTIVE)

    def test_everything_else_is_default(self):
        for condition in ("Clear", "Overcast", "Deadly Thunderstorm", "Heat Wave", "Blackout"):
            self.assertEqual(classify_severity(condition), Severity.DEFAULT, condition)

    def test_report_colour_follows_severity(self):
        report = render_report(outcome("Blood Rain", duration="3 Hours"), today=TODAY)
        self.assertEqual(report.severity, Severity.BLOOD)
        self.assertEqual(report.color, SEVERITY_COLORS[Severity.BLOOD])


class TestAdvisories(unittest.TestCase):

    def test_every_strange_condition_has_a_broadcast_and_effect(self):
        conditions = [c for c in get_strange_table().conditions if c != "Cold Snap/Heat Wave"]
        for condition in conditions + ["Cold Snap", "Heat Wave"]:
            self.assertIn(condition, EMERGENCY_BROADCASTS)
            self.assertIn(condition, CONDITION_EFFECTS)

    def test_cold_and_hot_temperatures(self):
        self.assertEqual(len(mechanical_effects("Cold (Around 35°F/2°C)", "Clear")), 1)
        self.assertEqual(len(mechanical_effects("Cold (Around 40°F/4°C)", "Clear")), 1)
        self.assertIn("Hot Temperature", mechanical_effects("Hot (Around 80°F/27°C)", "Clear")[0])

    def test_mild_temperatures_have_no_advisory(self):
        self.assertEqual(mechanical_effects("Cool (Around 50°F/10°C)", "Overcast"), [])
        self.assertEqual(mechanical_effects("Warm (Around 70°F/21°C)", "Clear"), [])

    def test_temperature_and_condition_effects_combine(self):
        effects = mechanical_effects("Cold (Around 35°F/2°C)", "Heavy Rain/Sleet")
        self.assertEqual(len(effects), 2)
        self.assertIn("Cold Temperature", effects[0])
        self.assertIn("Heavy Rain/Sleet", effects[1])

    def test_condition_effects_need_exact_name(self):
        self.assertEqual(mechanical_effects("Warm (Around 60°F/15°C)", "Light Rain"), [])


class TestRenderReport(unittest.TestCase):

    def test_broadcast_date_uses_fictional_year(self):
        self.assertEqual(format_broadcast_date(TODAY), "Sunday, October 18, 2047")
        self.assertEqual(format_broadcast_date(date(2026, 1, 5)), "Monday, January 5, 2047")

    def test_regular_weather_report(self):
        report = render_report(outcome(), today=TODAY)

        self.assertEqual(report.title, REPORT_TITLE)
        self.assertIsNone(report.description)
        self.assertEqual(report.footer, "NCWR • Fall • Time of the Red")
        self.assertEqual(report.fields[0].value, "Sunday, October 18, 2047")
        self.assertEqual(report.fields[1].value, "Warm (Around 60°F/15°C)")
        self.assertEqual(report.fields[2].value, "Clear")
        self.assertNotIn("⏱️ DURATION", field_names(report))
        self.assertNotIn("❗ ADVISORY", field_names(report))
        self.assertEqual(field_names(report)[-1], STANDING_BULLETIN_TITLE)

    def test_strange_weather_report(self):
        report = render_report(
            outcome("Deadly Thunderstorm", "Cold (Around 35°F/2°C)", "4 x 10 Minutes", Season.WINTER),
            today=TODAY,
        )
        self.assertEqual(report.description, EMERGENCY_BROADCASTS["Deadly Thunderstorm"])
        self.assertIn("⏱️ DURATION", field_names(report))
        advisory = "\n\n".join(f.value for f in report.fields if f.name.startswith("❗ ADVISORY"))
        self.assertIn("Cold Temperature", advisory)
        self.assertIn("Deadly Thunderstorm", advisory)
        self.assertEqual(report.footer, "NCWR • Winter • Time of the Red")

    def test_ongoing_events_are_listed(self):
        events = [
            OngoingEvent("Flooding", "4 Days", 3, TODAY),
            OngoingEvent("Blackout", "2 Days", 1, TODAY),
        ]
        report = render_report(outcome(), events, today=TODAY)
        ongoing = [f for f in report.fields if f.name == "🔄 CONTINUING FROM PREVIOUS DAYS"]
        self.assertEqual(len(ongoing), 1)
        self.assertEqual(
            ongoing[0].value,
            "🔄 **Flooding** - 3 days remaining\n🔄 **Blackout** - 1 day remaining",
        )

    def test_fields_fit_in_discord_limits(self):
        for condition in CONDITION_EFFECTS:
            report = render_report(outcome(condition, "Cold (Around 35°F/2°C)", "6 Days"), today=TODAY)
            for f in report.fields:
                self.assertLessEqual(len(f.value), FIELD_VALUE_LIMIT, f"{condition}: {f.name}")

    def test_to_text_skips_spacers(self):
        text = render_report(outcome(), today=TODAY).to_text()
        self.assertTrue(text.startswith(REPORT_TITLE))
        self.assertIn("☁️ CONDITIONS: Clear", text)
        self.assertNotIn("\u200b", text)


class TestSplitFieldValue(unittest.TestCase):

    def test_short_text_is_one_chunk(self):
        self.assertEqual(split_field_value("a\n\nb"), ["a\n\nb"])

    def test_paragraphs_are_packed(self):
        self.assertEqual(split_field_value("aaaa\n\nbbbb\n\ncc", limit=10), ["aaaa\n\nbbbb", "cc"])

    def test_long_paragraph_is_cut(self):
        self.assertEqual(split_field_value("x" * 25, limit=10), ["x" * 10, "x" * 10, "x" * 5])

    def test_custom_separator(self):
        self.assertEqual(split_field_value("ab\ncd\nef", limit=5, separator="\n"), ["ab\ncd", "ef"])


class TestHelp(unittest.TestCase):

    def test_help_lists_commands_and_schedule(self):
        report = render_help(time(8, 0))
        self.assertEqual(field_names(report), ["!weather", "!weather help", "Daily Posts"])
        self.assertEqual(report.fields[2].value, "Bot automatically posts weather at 8:00 AM daily")

    def test_help_uses_prefix_and_time(self):
        report = render_help(time(18, 30), prefix="?")
        self.assertEqual(report.fields[0].name, "?weather")
        self.assertIn("6:30 PM", report.fields[2].value)


if __name__ == '__main__':
    unittest.main()
