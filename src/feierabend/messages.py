"""Built-in display strings, looked up by key."""

from __future__ import annotations

import logging

logger = logging.getLogger("feierabend.messages")

FALLBACK_LANGUAGE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "appTitle": "Feierabend Calculator",
        "workingHours": "Working Hours",
        "targetHours": "Target",
        "todayBalance": "Today's Balance",
        "totalOvertime": "Total Overtime",
        "currentBalance": "Balance if leaving now",
        "suggestedEndTime": "To reach target, leave at:",
        "breakHint": "For working time under 6h, a break is not required by law",
        "countdownTitle": "Feierabend Countdown",
        "timeUntilEndTitle": "Time until end of work",
        "endOfWorkTitle": "End of work!",
        "endOfWorkMessage": "Your workday has ended. Time to go home!",
        "overtimeMessage": "You are doing overtime!",
        "almostDoneMessage": "Almost done! End of work soon.",
        "endingSoonMessage": "The workday is coming to an end.",
        "workdayCompleteMessage": "of the workday completed",
    },
    "de": {
        "appTitle": "Feierabend Rechner",
        "workingHours": "Arbeitszeit",
        "targetHours": "Soll",
        "todayBalance": "Saldo heute",
        "totalOvertime": "Überstunden gesamt",
        "currentBalance": "Saldo bei Feierabend jetzt",
        "suggestedEndTime": "Für das Soll gehen um:",
        "breakHint": "Unter 6h Arbeitszeit ist keine Pause vorgeschrieben",
        "countdownTitle": "Feierabend Countdown",
        "timeUntilEndTitle": "Zeit bis zum Feierabend",
        "endOfWorkTitle": "Feierabend!",
        "endOfWorkMessage": "Dein Arbeitstag ist jetzt beendet. Zeit nach Hause zu gehen!",
        "overtimeMessage": "Du machst Überstunden!",
        "almostDoneMessage": "Fast geschafft! Bald ist Feierabend.",
        "endingSoonMessage": "Der Arbeitstag neigt sich dem Ende zu.",
        "workdayCompleteMessage": "des Arbeitstages absolviert",
    },
}


def lookup(key: str, language: str = FALLBACK_LANGUAGE) -> str:
    """Return the string for key, falling back to English, then to the key."""
    table = MESSAGES.get(language)
    if table and key in table:
        return table[key]
    fallback = MESSAGES[FALLBACK_LANGUAGE]
    if key in fallback:
        return fallback[key]
    logger.debug(f"No message for key {key!r} in language {language!r}")
    return key
