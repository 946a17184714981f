import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from dice import DiceRoller
from weather_tables import (
    COLD_SNAP_HEAT_WAVE,
    STRANGE,
    Season,
    current_season,
    get_season_table,
    get_strange_table,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeatherOutcome:
    temperature: str
    condition: str
    duration: Optional[str]
    season: Season


# Helper functions
def resolve_cold_snap_heat_wave(temperature):
    """A cool or cold day turns into a Cold Snap, anything warmer into a Heat Wave."""
    if "Cool" in temperature or "Cold" in temperature:
        return "Cold Snap"
    return "Heat Wave"


def instantiate_duration(template, roll):
    """Fill the 1d6 placeholder of a duration template, e.g. "1d6 Days" -> "4 Days"."""
    return template.replace("1d6", str(roll))


class WeatherGenerator:
    """
    Rolls one day of Night City weather.

    A d6 picks the temperature and another d6 the condition from the season's
    table. A "Strange" condition rolls a d10 on the strange weather table and
    a d6 for its duration; multi-day results are handed to the event ledger.
    """

    def __init__(self, ledger=None, roller=None, clock=date.today):
        self.ledger = ledger
        self.roller = roller or DiceRoller()
        self.clock = clock

    def roll_strange_weather(self, temperature):
        """Return ``(condition, duration)`` from the strange weather table."""
        table = get_strange_table()
        strange_roll = self.roller.roll(10) - 1  # Convert to 0-9 for tuple index
        duration_roll = self.roller.roll(6)

        condition = table.conditions[strange_roll]
        duration = instantiate_duration(table.durations[strange_roll], duration_roll)

        if condition == COLD_SNAP_HEAT_WAVE:
            condition = resolve_cold_snap_heat_wave(temperature)
        return condition, duration

    def generate(self, today=None) -> WeatherOutcome:
        today = today or self.clock()
        season = current_season(today)
        table = get_season_table(season)

        temp_roll = self.roller.roll(6) - 1  # Convert to 0-5 for tuple index
        condition_roll = self.roller.roll(6) - 1

        temperature = table.temperature[temp_roll]
        condition = table.condition[condition_roll]
        duration = None

        if condition == STRANGE:
            condition, duration = self.roll_strange_weather(temperature)
            logger.info(f"Strange weather rolled: {condition} for {duration}")
            if self.ledger is not None:
                self.ledger.add_event(condition, duration, today=today)

        outcome = WeatherOutcome(
            temperature=temperature,
            condition=condition,
            duration=duration,
            season=season,
        )
        logger.info(f"Generated {season.value} weather: {temperature}, {condition}")
        return outcome


def generate_weather(ledger=None, roller=None, today=None):
    """Roll a single day's weather - convenience wrapper around WeatherGenerator."""
    return WeatherGenerator(ledger=ledger, roller=roller).generate(today)
