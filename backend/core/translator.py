"""
Market translator: API-Football English market names and option labels to
the Spanish strings shown in the app.

Each lookup runs three tiers and never raises:

    1. Exact match against a static table.
    2. Ordered lower-case substring rules; first match wins.
    3. Passthrough of the original string.

Rules are plain ``(predicate, result)`` pairs so that the order is visible
in one place and every rule can be exercised on its own in tests.
"""

from typing import Callable, Dict, List, Optional, Tuple

Predicate = Callable[[str], bool]
Rule = Tuple[Predicate, str]

OVER_PREFIX = "Over "
UNDER_PREFIX = "Under "
OVER_ES = "Más de"
UNDER_ES = "Menos de"


# ---------------------------------------------------------------------------
# Exact tables
# ---------------------------------------------------------------------------

MARKET_TRANSLATIONS: Dict[str, str] = {
    # Result
    "Match Winner": "Ganador del Partido",
    "Winner": "Ganador del Partido",
    "First Half Winner": "Ganador Primera Parte",
    "Second Half Winner": "Ganador Segunda Parte",
    "Fulltime Result": "Resultado Final",
    "Halftime Result": "Resultado al Descanso",
    "Halftime/Fulltime": "Resultado Descanso/Final",
    "Double Chance": "Doble Oportunidad",
    "Home/Away": "Gana Local o Visitante (Sin Empate)",
    "Draw No Bet": "Gana con Reembolso si Empate",
    "To Qualify": "Clasificación",
    "Exact Score": "Resultado Exacto",
    "Correct Score": "Resultado Exacto",
    "10 Minutes Result": "Resultado 10 Minutos",
    "15 Minutes Result": "Resultado 15 Minutos",
    # Goals
    "Goals Over/Under": "Más/Menos Goles",
    "Over/Under": "Más/Menos Goles",
    "Total Goals": "Total de Goles",
    "Home Team Total Goals": "Total Goles Local",
    "Away Team Total Goals": "Total Goles Visitante",
    "Both Teams Score": "Ambos Equipos Marcan",
    "Both Teams To Score": "Ambos Equipos Marcan",
    "BTTS": "Ambos Equipos Marcan",
    "First Team To Score": "Primer Equipo en Marcar",
    "Last Team To Score": "Último Equipo en Marcar",
    "Team To Score First": "Equipo que Marca Primero",
    "Team To Score Last": "Equipo que Marca Último",
    "Anytime Goalscorer": "Marcará en Cualquier Momento",
    "First Goalscorer": "Primer Goleador",
    "Last Goalscorer": "Último Goleador",
    "Highest Scoring Half": "Parte con Más Goles",
    "Time Of First Goal": "Tiempo del Primer Gol",
    "First Goal": "Primer Gol",
    "Multigoals": "Multigoles",
    "Home Multigoals": "Multigoles Local",
    "Away Multigoals": "Multigoles Visitante",
    "Home Team Score A Goal": "Local Marca un Gol",
    "Away Team Score A Goal": "Visitante Marca un Gol",
    "Home Team Score a Goal": "Local Marca un Gol",
    "Away Team Score a Goal": "Visitante Marca un Gol",
    # Halves
    "First Half Goals Over/Under": "Más/Menos Goles Primera Parte",
    "Second Half Goals Over/Under": "Más/Menos Goles Segunda Parte",
    "First Half Total Goals": "Total Goles Primera Parte",
    "Second Half Total Goals": "Total Goles Segunda Parte",
    "Goal In Both Halves": "Gol en Ambas Partes",
    "Score In Both Halves": "Marcar en Ambas Partes",
    "Win Either Half": "Ganar Alguna Parte",
    "Win Both Halves": "Ganar Ambas Partes",
    "To Win From Behind": "Ganar Remontando",
    # Corners and cards
    "Corners Over/Under": "Más/Menos Corners",
    "Total Corners": "Total de Corners",
    "Home Team Corners": "Corners del Local",
    "Away Team Corners": "Corners del Visitante",
    "First Half Corners": "Corners Primera Parte",
    "Second Half Corners": "Corners Segunda Parte",
    "Cards Over/Under": "Más/Menos Tarjetas",
    "Total Cards": "Total de Tarjetas",
    "Home Team Cards": "Tarjetas del Local",
    "Away Team Cards": "Tarjetas del Visitante",
    "Player Cards": "Tarjetas de Jugadores",
    # Clean sheet / win to nil
    "Win To Nil": "Ganar sin Encajar",
    "To Win To Nil": "Ganar sin Encajar",
    "Home Win To Nil": "Local Gana sin Encajar",
    "Away Win To Nil": "Visitante Gana sin Encajar",
    "Clean Sheet": "Portería a Cero",
    "Clean Sheet - Home": "Portería a Cero - Local",
    "Clean Sheet - Away": "Portería a Cero - Visitante",
    "Home Clean Sheet": "Portería a Cero - Local",
    "Away Clean Sheet": "Portería a Cero - Visitante",
    # Odd/even
    "Odd/Even": "Goles Par/Impar",
    "Odd/Even Goals": "Goles Par/Impar",
    "Home Odd/Even": "Goles Par/Impar Local",
    "Away Odd/Even": "Goles Par/Impar Visitante",
    # Handicaps (discarded by the selector, translated for completeness)
    "Asian Handicap": "Hándicap Asiático",
    "European Handicap": "Hándicap Europeo",
    "Handicap": "Hándicap",
    "Handicap Result": "Resultado con Hándicap",
    "Alternative Handicap": "Hándicap Alternativo",
    "Goals Handicap": "Hándicap de Goles",
    "3-Way Handicap": "Hándicap 3 Vías",
    # Combos
    "Both Teams To Score & Total": "Ambos Marcan y Total",
    "Result & Both Teams To Score": "Resultado y Ambos Marcan",
    "Result & Total Goals": "Resultado y Total de Goles",
}

LABEL_TRANSLATIONS: Dict[str, str] = {
    "Home": "Gana Local",
    "Draw": "Empate",
    "Away": "Gana Visitante",
    "1": "Gana Local",
    "X": "Empate",
    "2": "Gana Visitante",
    "Home/Draw": "Local o Empate",
    "Home/Away": "Local o Visitante",
    "Draw/Away": "Empate o Visitante",
    "1X": "Local o Empate",
    "12": "Local o Visitante",
    "X2": "Empate o Visitante",
    "Yes": "Sí",
    "No": "No",
    "Over": OVER_ES,
    "Under": UNDER_ES,
    "Odd": "Impar",
    "Even": "Par",
    "1st Half": "Primera Parte",
    "2nd Half": "Segunda Parte",
    "First Half": "Primera Parte",
    "Second Half": "Segunda Parte",
    "None": "Ninguno",
    "Both": "Ambos",
    "Either": "Cualquiera",
    "No Goal": "Sin Goles",
    "0-10": "0-10 min",
    "11-20": "11-20 min",
    "21-30": "21-30 min",
    "31-40": "31-40 min",
    "41-50": "41-50 min",
    "51-60": "51-60 min",
    "61-70": "61-70 min",
    "71-80": "71-80 min",
    "81-90": "81-90 min",
}


# ---------------------------------------------------------------------------
# Heuristic rules
# ---------------------------------------------------------------------------

def _all(*words: str) -> Predicate:
    return lambda s: all(w in s for w in words)


def _over_under(*words: str) -> Predicate:
    return lambda s: all(w in s for w in words) and ("over" in s or "under" in s)


def _result_not_handicap(*words: str) -> Predicate:
    return lambda s: all(w in s for w in words) and "handicap" not in s


MARKET_RULES: List[Rule] = [
    # win to nil
    (_all("win to nil", "home"), "Local Gana sin Encajar"),
    (_all("win to nil", "away"), "Visitante Gana sin Encajar"),
    (_all("win to nil"), "Ganar sin Encajar"),
    # highest scoring half
    (_all("highest scoring half"), "Parte con Más Goles"),
    # goals
    (_over_under("goals", "first half"), "Más/Menos Goles Primera Parte"),
    (_over_under("goals", "second half"), "Más/Menos Goles Segunda Parte"),
    (_over_under("goals", "home"), "Más/Menos Goles Local"),
    (_over_under("goals", "away"), "Más/Menos Goles Visitante"),
    (_over_under("goals"), "Más/Menos Goles"),
    (_all("both", "score"), "Ambos Equipos Marcan"),
    # corners
    (_over_under("corner"), "Más/Menos Corners"),
    (_all("corner"), "Total de Corners"),
    # cards
    (_over_under("card"), "Más/Menos Tarjetas"),
    (_all("card"), "Total de Tarjetas"),
    # clean sheet
    (_all("clean sheet", "home"), "Portería a Cero - Local"),
    (_all("clean sheet", "away"), "Portería a Cero - Visitante"),
    (_all("clean sheet"), "Portería a Cero"),
    # winner
    (_all("winner", "first half"), "Ganador Primera Parte"),
    (_all("winner", "second half"), "Ganador Segunda Parte"),
    (_all("winner"), "Ganador del Partido"),
    # result
    (_result_not_handicap("result", "first half"), "Resultado al Descanso"),
    (_result_not_handicap("result", "halftime"), "Resultado al Descanso"),
    (_result_not_handicap("result"), "Resultado Final"),
    # odd/even
    (_all("odd/even", "home"), "Goles Par/Impar Local"),
    (_all("odd/even", "away"), "Goles Par/Impar Visitante"),
    (_all("odd/even"), "Goles Par/Impar"),
    # handicap result
    (_all("handicap", "result"), "Resultado con Hándicap"),
    # win both halves
    (_all("win both halves"), "Ganar Ambas Partes"),
    # scorer order
    (_all("first", "goalscorer"), "Primer Goleador"),
    (_all("last", "goalscorer"), "Último Goleador"),
    (_all("anytime", "goalscorer"), "Marcará en Cualquier Momento"),
    (_all("first", "to score"), "Primer Equipo en Marcar"),
    (_all("last", "to score"), "Último Equipo en Marcar"),
]

LABEL_RULES: List[Rule] = [
    (_all("clean sheet", "home"), "Sí - Local"),
    (_all("clean sheet", "away"), "Sí - Visitante"),
    (_all("clean sheet", "yes"), "Sí"),
    (_all("clean sheet", "no"), "No"),
]


def _apply_rules(text: str, rules: List[Rule]) -> Optional[str]:
    lowered = text.lower()
    for predicate, result in rules:
        if predicate(lowered):
            return result
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def translate_market(name: str) -> str:
    """Translate a provider market name; unknown names pass through."""
    if not name:
        return name
    if name in MARKET_TRANSLATIONS:
        return MARKET_TRANSLATIONS[name]
    return _apply_rules(name, MARKET_RULES) or name


def translate_label(
    label: str,
    home_team: Optional[str] = None,
    away_team: Optional[str] = None,
) -> str:
    """
    Translate a provider option label.

    ``Over 2.5`` / ``Under 2.5`` keep their line and get the Spanish prefix.
    Labels naming either team are returned untouched.
    """
    if not label:
        return label
    if label in LABEL_TRANSLATIONS:
        return LABEL_TRANSLATIONS[label]

    for team in (home_team, away_team):
        if team and team in label:
            return label

    if label.startswith(OVER_PREFIX):
        return f"{OVER_ES} {label[len(OVER_PREFIX):]}"
    if label.startswith(UNDER_PREFIX):
        return f"{UNDER_ES} {label[len(UNDER_PREFIX):]}"

    translated = _apply_rules(label, LABEL_RULES)
    if translated:
        return translated

    return label
