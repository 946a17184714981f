from collections import namedtuple
from datetime import date
from enum import Enum

# Sentinel condition that triggers a roll on the strange weather table
STRANGE = "Strange"
COLD_SNAP_HEAT_WAVE = "Cold Snap/Heat Wave"


class Season(str, Enum):
    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"


WeatherTableEntry = namedtuple("WeatherTableEntry", ["temperature", "condition"])
StrangeWeatherEntry = namedtuple("StrangeWeatherEntry", ["conditions", "durations"])

# Weather tables from the Night City Weather DLC, one d6 per column
WEATHER_TABLES = {
    Season.WINTER: WeatherTableEntry(  # December to February
        temperature=(
            "Cold (Around 35°F/2°C)",
            "Cold (Around 40°F/4°C)",
            "Cold (Around 40°F/4°C)",
            "Cool (Around 50°F/10°C)",
            "Cool (Around 50°F/10°C)",
            "Cool (Around 60°F/15°C)",
        ),
        condition=(
            "Clear",
            "Light Rain/Sleet",
            "Overcast",
            "Overcast",
            "Heavy Rain/Sleet",
            STRANGE,
        ),
    ),
    Season.SPRING: WeatherTableEntry(  # March to May
        temperature=(
            "Cold (Around 40°F/4°C)",
            "Cool (Around 50°F/10°C)",
            "Cool (Around 50°F/10°C)",
            "Cool (Around 50°F/10°C)",
            "Warm (Around 60°F/15°C)",
            "Warm (Around 70°F/21°C)",
        ),
        condition=(
            "Clear",
            "Light Rain",
            "Overcast",
            "Light Rain",
            "Heavy Rain",
            STRANGE,
        ),
    ),
    Season.SUMMER: WeatherTableEntry(  # June to August
        temperature=(
            "Warm (Around 60°F/15°C)",
            "Warm (Around 70°F/21°C)",
            "Warm (Around 70°F/21°C)",
            "Hot (Around 80°F/27°C)",
            "Hot (Around 80°F/27°C)",
            "Hot (Around 90°F/32°C)",
        ),
        condition=(
            "Light Rain",
            "Clear",
            "Overcast",
            "Overcast",
            "Clear",
            STRANGE,
        ),
    ),
    Season.FALL: WeatherTableEntry(  # September to November
        temperature=(
            "Cool (Around 40°F/4°C)",
            "Warm (Around 60°F/15°C)",
            "Warm (Around 60°F/15°C)",
            "Warm (Around 60°F/15°C)",
            "Warm (Around 70°F/21°C)",
            "Hot (Around 80°F/27°C)",
        ),
        condition=(
            "Light Rain/Sleet",
            "Clear",
            "Overcast",
            "Overcast",
            "Clear",
            STRANGE,
        ),
    ),
}

# Strange weather, one d10 picks the row; durations are rolled with a d6
STRANGE_WEATHER = StrangeWeatherEntry(
    conditions=(
        "Radioactive Windstorm",
        "Ash Storm",
        "Flooding",
        "Blood Rain",
        "Acid Rain",
        "Deadly Thunderstorm",
        "Inversion Smog",
        COLD_SNAP_HEAT_WAVE,
        "Dust Storm",
        "Blackout",
    ),
    durations=(
        "1d6 x 10 Minutes",
        "1d6 x 10 Minutes",
        "1d6 Days",
        "1d6 Hours",
        "1d6 Hours",
        "1d6 x 10 Minutes",
        "1d6 Days",
        "1d6 Days",
        "1d6 x 10 Minutes",
        "1d6 Days",
    ),
)

SEASON_TABLE_SIZE = 6
STRANGE_TABLE_SIZE = 10

_SEASON_BY_MONTH = {
    12: Season.WINTER, 1: Season.WINTER, 2: Season.WINTER,
    3: Season.SPRING, 4: Season.SPRING, 5: Season.SPRING,
    6: Season.SUMMER, 7: Season.SUMMER, 8: Season.SUMMER,
    9: Season.FALL, 10: Season.FALL, 11: Season.FALL,
}


def season_for_month(month: int) -> Season:
    """Map a calendar month (1-12) to its season."""
    try:
        return _SEASON_BY_MONTH[month]
    except KeyError:
        raise ValueError(f"Month must be between 1 and 12, got {month}") from None


def current_season(today=None) -> Season:
    """Determine the current season based on the real-world date."""
    today = today or date.today()
    return season_for_month(today.month)


def get_season_table(season) -> WeatherTableEntry:
    return WEATHER_TABLES[Season(season)]


def get_strange_table() -> StrangeWeatherEntry:
    return STRANGE_WEATHER
