"""
Turns a rolled weather outcome into a Night City Weather Report (NCWR).

Everything here is a static lookup: the severity colour, the emergency
broadcast line and the mechanical advisories are keyed by the exact
condition name, temperature advisories by a substring of the temperature band.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from weather_tables import Season

FICTIONAL_YEAR = 2047
FIELD_VALUE_LIMIT = 1024
ZERO_WIDTH_SPACE = "\u200b"

REPORT_TITLE = "🏙️ NCWR - NIGHT CITY WEATHER REPORT"
HELP_TITLE = "🤖 Night City Weather Bot Commands"
GOOD_MORNING = "🌅 **Good morning, Night City!** Here's your daily weather report:"
NCW_SOURCE = "[(NCW)](https://rtalsoriangames.com/wp-content/uploads/2021/07/RTG-CPR-NightCityWeather.pdf)"


class Severity(str, Enum):
    DEFAULT = "default"
    BLOOD = "blood"
    CORROSIVE = "corrosive"
    STORM = "storm"
    RADIOACTIVE = "radioactive"


SEVERITY_COLORS = {
    Severity.DEFAULT: 0x00BFFF,
    Severity.BLOOD: 0xFF0000,
    Severity.CORROSIVE: 0xFFFF00,
    Severity.STORM: 0x800080,
    Severity.RADIOACTIVE: 0x00FF00,
}

SEVERITY_BY_CONDITION = {
    "Blood Rain": Severity.BLOOD,
    "Acid Rain": Severity.CORROSIVE,
    "Ash Storm": Severity.STORM,
    "Dust Storm": Severity.STORM,
    "Radioactive Windstorm": Severity.RADIOACTIVE,
}

# Emergency broadcasts, only for strange weather
EMERGENCY_BROADCASTS = {
    "Blood Rain": "🚨 **WEATHER EMERGENCY** • The sky is crying blood! All citizens advised to seek immediate shelter.",
    "Acid Rain": "⚠️ **CORROSION ALERT** • Acidic precipitation detected. Equipment damage likely.",
    "Radioactive Windstorm": "☢️ **RADIATION WARNING** • Hot Zone particles detected. Radiation suits essential.",
    "Ash Storm": "🌫️ **AIR QUALITY EMERGENCY** • Toxic ash clouds detected. Breathing apparatus required.",
    "Deadly Thunderstorm": "⛈️ **SEVERE WEATHER ALERT** • Dangerous electrical activity. Avoid metallic objects.",
    "Cold Snap": "🧊 **FREEZE WARNING** • Sub-zero temperatures creating hazardous ice conditions.",
    "Heat Wave": "🔥 **HEAT EMERGENCY** • Extreme temperatures pose serious health risks.",
    "Dust Storm": "💨 **VISIBILITY ALERT** • Badlands dust storm approaching. Respiratory protection advised.",
    "Inversion Smog": "🏭 **POLLUTION ADVISORY** • Toxic smog levels critical. Breathing apparatus mandatory.",
    "Flooding": "🌊 **FLOOD WARNING** • Water levels rising. Avoid underground areas.",
    "Blackout": "🔌 **INFRASTRUCTURE FAILURE** • Widespread power outages reported.",
}


def _ncw(text):
    return f"{text} {NCW_SOURCE}"


# (band substrings, advisory) pairs checked against the temperature
TEMPERATURE_EFFECTS = (
    (
        ("Cold (Around 35°F", "Cold (Around 40°F"),
        _ncw("❄️ **Cold Temperature**: The temperature is below normal tolerance limits for the average person. "
             "Anyone who spends most of the day outside or inside but in non-heated environment without proper "
             "protective gear suffers damage via Exposure (CP:R page 181)."),
    ),
    (
        ("Hot (Around",),
        _ncw("🔥 **Hot Temperature**: The temperature has risen to an uncomfortable degree. Increase any "
             "preexisting Armor Penalty to REF, DEX, and MOVE by 1. For example, a -2 penalty becomes a -3 penalty."),
    ),
)

CONDITION_EFFECTS = {
    "Acid Rain": _ncw(
        "☣️ **Acid Rain**: Almost all rain that falls in Night City is lightly acidic but occasionally a storm "
        "brings precipitation so corrosive it can cause damage in a matter of hours instead of years. For each "
        "full minute spent in Acid Rain without protection, ablate all worn armor by 1 SP."),
    "Ash Storm": _ncw(
        "🌫️ **Ash Storm**: Fires, in both urban areas and in the Badlands, aren't uncommon in the Time of the "
        "Red. Occasionally, they burn so hot, long, and large that the wind blows the toxic ashes and smoke across "
        "Night City. Treat anyone who spends more than one minute in an Ash Storm without Nasal Filters, Anti-Smog "
        "Breathing Mask, or a similar device as if they have been exposed to a Vial of Poison (CP:R page 355). "
        "They also suffer the Foreign Object Critical Injury as the ash clogs their lungs and sinus passages, "
        "though they do not take the initial Bonus Damage. This Critical Injury can't be tended to until the "
        "patient leaves the Ash Storm. Also GMs can, at their discretion, apply a -2 penalty to any appropriate "
        "Skill Check, including Perception Checks to see and ranged attack Checks to hit a target at a distance."),
    "Blood Rain": _ncw(
        "🩸 **Blood Rain**: An aftereffect of the 4th Corporate War, Blood Rain is a greasy, pinkish-red form of "
        "precipitation known to carry various caustic substances, toxins, and radioactive particles. Roll 1d6. On "
        "a 1 to 3, the Blood Rain acts just like Acid Rain, although it smells much worse. On a 4 to 6, once per "
        "minute treat anyone exposed to the Blood Rain without protection as if they we dosed with a Vial of "
        "Biotoxin (CP:R page 355). Also GMs can, at their discretion, apply a -1 penalty to any appropriate Skill "
        "Check, including Perception Checks to see and ranged attack Checks to hit a target at a distance."),
    "Cold Snap": _ncw(
        "🧊 **Cold Snap**: The weather has turned incredibly cold, dropping below freezing. This overrides any "
        "roll made for Temperature on a Weather table. The rules for Exposure (CP:R page 181) apply. In addition, "
        "black ice forms everywhere, making conditions treacherous. GMs can, at their discretion, apply a -2 "
        "penalty to any appropriate Skill Check made while on icy surfaces."),
    "Deadly Thunderstorm": _ncw(
        "⚡ **Deadly Thunderstorm**: While thunderstorms are rare in Night City, when they happen they trend "
        "towards incredibly destructive. Once per ten minute period during the storm, the GM should roll 1d6. On "
        "a 1 to 3, the lightning strikes far away. On a 4 to 6, the lighting strikes the tallest nearby structure "
        "or natural feature. If there is no such structure or natural feature nearby, it strikes either the "
        "tallest Character or the Character holding a two-handed metal weapon. If the Character struck is "
        "touching another Character (for example, via a Grapple) they are both struck. Anyone hit by lightning "
        "takes 6d6 damage to their body and the lightning strike counts as a flashbang grenade (CP:R page 346) "
        "centered on the struck Character. Also GMs can, at their discretion, apply a -2 penalty to any "
        "appropriate Skill Check, including Perception Checks to see and ranged attack Checks to hit a target at "
        "a distance."),
    "Dust Storm": _ncw(
        "💨 **Dust Storm**: Northern California has been in a drought since at least the 2020s, transforming much "
        "of the land outside of Night City into desert often known as the Badlands. Strong winds occasionally pick "
        "up loose particles of dust and debris from those erosion-prone wastes and blows them into the city "
        "proper. Anyone who spends more than five minutes in a Dust Storm without Nasal Filters, Anti-Smog "
        "Breathing Mask, or a similar device suffers the Foreign Object Critical Injury as the dust clogs their "
        "lungs and sinus passages, though they do not take the initial Bonus Damage. This Critical Injury can't be "
        "tended to until the patient is removed from the Dust Storm. GMs can, at their discretion, apply a -2 "
        "penalty to any appropriate Skill Check, including Perception Checks to see and ranged attack Checks to "
        "hit a target at a distance."),
    "Heat Wave": _ncw(
        "🔥 **Heat Wave**: Thanks to climate change, more and more often the temperature in Night City spikes into "
        "the low 100s and 110s. This overrides any roll made for Temperature on a Weather table. In such "
        "oppressive heat, those who wear bulky gear like heavy armors can suffer tremendously. The rules for "
        "Exposure (CP:R page 181) apply. Increase any preexisting Armor Penalty to REF, DEX, and MOVE by 2. For "
        "example, a -2 penalty becomes a -4 penalty."),
    "Heavy Rain/Sleet": _ncw(
        "🌧️ **Heavy Rain/Sleet**: Not only does heavy rain (or sleet in colder weather) make surfaces slick but "
        "it also impacts visibility. GMs can, at their discretion, apply a -2 penalty to any appropriate Skill "
        "Check, including Perception Checks to see and ranged attack Checks to hit a target at a distance."),
    "Inversion Smog": _ncw(
        "☁️ **Inversion Smog**: Despite the switchover from gasoline to CHOOH2, intense smog \"as thick as pea "
        "soup\" remains a problem in Night City due to lax regulations, regular fires, and industrial toxins "
        "spilling into the atmosphere. Treat anyone who spends more than one minute in an Inversion Smog without "
        "Nasal Filters, Anti-Smog Breathing Mask, or a similar device as if they have been exposed to a Vial of "
        "Poison (CP:R page 355). GMs can, at their discretion, apply a -4 penalty to any appropriate Skill Check, "
        "including Perception Checks to see and ranged attack Checks to hit a target at a distance."),
    "Light Rain/Sleet": _ncw(
        "💧 **Light Rain/Sleet**: A Cyberpunk classic, light rain (or sleet in colder weather) doesn't reduce "
        "visibility but can make surfaces slick. GMs can, at their discretion, apply a -1 penalty to any "
        "appropriate Skill Check such as an Athletics Check to climb a slippery fence or a Drive Land Vehicle "
        "Check to perform a maneuver on wet roads."),
    "Radioactive Windstorm": _ncw(
        "☢️ **Radioactive Windstorm**: Good news? The Hot Zone isn't as radioactive as it used to be. Bad news? "
        "The Hot Zone is still somewhat radioactive and strong winds occasionally blow radioactive particles into "
        "other parts of Night City. Anyone exposed to the Radioactive Winds who is not protected by a Radiation "
        "Suit or similar item is treated as if they are exposed to high level radiation (CP:R page 181). "
        "Radioactive wind burst begin at the GM's discretion and last for 1d6 Rounds."),
    "Flooding": _ncw(
        "🌊 **Flooding**: The nuclear blast that destroyed the Arasaka Tower back in 2022 also destabilized the "
        "fill much of Night City is built on. Repairs have been made over the years but, occasionally, ocean water "
        "seeps up through the cracks and floods a section of the city. At street level, the water levels rarely "
        "rise to above more than a few inches, making it more a nuisance than a real problem. Below ground, the "
        "flooding can fill basements and tunnels. Wading through a deeply flooded area uses the rules for an "
        "\"other form of movement\" (CP:R page 169)."),
    "Blackout": _ncw(
        "⚡ **Blackout**: While not an actual weather condition, loss of power, CitiNet access, and communications "
        "often happens due to extreme meteorological activity. The GM can determine where the outage is (1d10 "
        "blocks or neighborhood zones centered on the crew's current location, if determining randomly). For the "
        "duration of the outage, any building in the area without a generator won't have electricity and Agents "
        "won't be able to make calls or connect to the Data Pool."),
}

# Campaign notice shown at the bottom of every report
STANDING_BULLETIN_TITLE = "⚡ ONGOING EVENT"
STANDING_BULLETIN = _ncw(
    "Intermittent blackouts continue to affect **Little Europe**, **Old Japantown**, **The Glen**, "
    "**Little China**, **University District**, and **Upper Marina** (bordering the Hot Zone). Citizens in these "
    "areas should expect power fluctuations and prepare accordingly.\n\n**Blackout Effects**: While not an actual "
    "weather condition, loss of power, CitiNet access, and communications often happens due to extreme "
    "meteorological activity. For the duration of the outage, any building in the area without a generator won't "
    "have electricity and Agents won't be able to make calls or connect to the Data Pool.")


@dataclass
class ReportField:
    name: str
    value: str
    inline: bool = False


@dataclass
class WeatherReport:
    title: str
    color: int
    fields: List[ReportField] = field(default_factory=list)
    description: Optional[str] = None
    footer: Optional[str] = None
    severity: Severity = Severity.DEFAULT

    def add_field(self, name, value, inline=False):
        self.fields.append(ReportField(name, value, inline))
        return self

    def to_text(self) -> str:
        """Plain-text rendering, used for logging and console output."""
        lines = [self.title]
        if self.description:
            lines.append(self.description)
        for f in self.fields:
            if f.value == ZERO_WIDTH_SPACE:
                continue
            lines.append(f"{f.name}: {f.value}")
        if self.footer:
            lines.append(self.footer)
        return "\n".join(lines)


def classify_severity(condition) -> Severity:
    return SEVERITY_BY_CONDITION.get(condition, Severity.DEFAULT)


def emergency_broadcast(condition) -> Optional[str]:
    return EMERGENCY_BROADCASTS.get(condition)


def mechanical_effects(temperature, condition) -> List[str]:
    """Collect the advisories for a temperature band and a condition."""
    effects = [
        text for bands, text in TEMPERATURE_EFFECTS
        if any(band in temperature for band in bands)
    ]
    if condition in CONDITION_EFFECTS:
        effects.append(CONDITION_EFFECTS[condition])
    return effects


def format_broadcast_date(today=None) -> str:
    """Today's weekday, month and day, in the year 2047."""
    today = today or date.today()
    return f"{today:%A}, {today:%B} {today.day}, {FICTIONAL_YEAR}"


def format_days_remaining(days):
    return "1 day" if days == 1 else f"{days} days"


def split_field_value(value, limit=FIELD_VALUE_LIMIT, separator="\n\n"):
    """Split text into chunks of at most ``limit`` characters, breaking on ``separator`` where possible."""
    chunks = []
    current = ""
    for paragraph in value.split(separator):
        while len(paragraph) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(paragraph[:limit])
            paragraph = paragraph[limit:]
        candidate = f"{current}{separator}{paragraph}" if current else paragraph
        if len(candidate) > limit:
            chunks.append(current)
            current = paragraph
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


def render_report(outcome, active_events=(), today=None) -> WeatherReport:
    severity = classify_severity(outcome.condition)
    season = Season(outcome.season).value

    report = WeatherReport(
        title=REPORT_TITLE,
        color=SEVERITY_COLORS[severity],
        severity=severity,
        description=emergency_broadcast(outcome.condition),
        footer=f"NCWR • {season.capitalize()} • Time of the Red",
    )
    report.add_field("BROADCAST DATE", format_broadcast_date(today))
    report.add_field("🌡️ TEMPERATURE", outcome.temperature, inline=True)
    report.add_field("☁️ CONDITIONS", outcome.condition, inline=True)
    report.add_field(ZERO_WIDTH_SPACE, ZERO_WIDTH_SPACE, inline=True)  # Spacer

    if outcome.duration:
        report.add_field("⏱️ DURATION", outcome.duration, inline=True)

    if active_events:
        ongoing_text = "\n".join(
            f"🔄 **{event.condition}** - {format_days_remaining(event.days_remaining)} remaining"
            for event in active_events
        )
        for chunk in split_field_value(ongoing_text, separator="\n"):
            report.add_field("🔄 CONTINUING FROM PREVIOUS DAYS", chunk)

    effects = mechanical_effects(outcome.temperature, outcome.condition)
    if effects:
        for i, chunk in enumerate(split_field_value("\n\n".join(effects))):
            report.add_field("❗ ADVISORY" if i == 0 else "❗ ADVISORY (cont.)", chunk)

    report.add_field("▬" * 40, ZERO_WIDTH_SPACE)
    for chunk in split_field_value(STANDING_BULLETIN):
        report.add_field(STANDING_BULLETIN_TITLE, chunk)
    return report


def render_help(post_time=None, prefix="!") -> WeatherReport:
    """Static help card listing the bot's commands."""
    schedule = post_time.strftime("%I:%M %p").lstrip("0") if post_time else "8:00 AM"
    report = WeatherReport(
        title=HELP_TITLE,
        color=SEVERITY_COLORS[Severity.DEFAULT],
        description="Based on the official Night City Weather tables from Cyberpunk RED",
    )
    report.add_field(f"{prefix}weather", "Roll current weather conditions")
    report.add_field(f"{prefix}weather help", "Show this help message")
    report.add_field("Daily Posts", f"Bot automatically posts weather at {schedule} daily")
    return report
