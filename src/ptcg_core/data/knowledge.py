"""Static Pokemon TCG knowledge tables.

Read-only reference data shared by every analysis stage. Names are stored
lowercased; lookups lowercase the card name first. Metagame-dependent data
(archetypes, key cards, ban lists) lives in the versioned meta snapshot
instead, see :mod:`ptcg_core.data.meta_snapshot`.
"""

from __future__ import annotations

from typing import Final

ENERGY_TYPES: Final = (
    "Grass",
    "Fire",
    "Water",
    "Lightning",
    "Psychic",
    "Fighting",
    "Darkness",
    "Metal",
    "Fairy",
    "Dragon",
    "Colorless",
)

# Which attacking types each defending type is weak to
TYPE_WEAKNESSES: Final[dict[str, tuple[str, ...]]] = {
    "Fire": ("Water",),
    "Water": ("Lightning", "Grass"),
    "Grass": ("Fire",),
    "Lightning": ("Fighting",),
    "Psychic": ("Darkness", "Psychic"),
    "Fighting": ("Psychic", "Grass"),
    "Darkness": ("Fighting", "Grass"),
    "Metal": ("Fire",),
    "Fairy": ("Metal",),
    "Dragon": (),
    "Colorless": ("Fighting",),
}


# =============================================================================
# Trainer tables (name -> power rating 1-10)
# =============================================================================

DRAW_SUPPORTERS: Final[dict[str, int]] = {
    "professor's research": 10,
    "colress's experiment": 9,
    "iono": 8,
    "marnie": 7,
    "judge": 6,
    "cynthia": 8,
    "professor juniper": 10,
    "professor sycamore": 10,
    "n": 9,
    "lillie": 6,
    "hop": 7,
    "bianca": 7,
    "hau": 5,
    "erika's hospitality": 5,
    "tate & liza": 4,
    "trekking shoes": 6,
    "bibarel": 8,
}

SEARCH_CARDS: Final[dict[str, int]] = {
    "ultra ball": 10,
    "battle vip pass": 10,
    "quick ball": 9,
    "nest ball": 7,
    "level ball": 6,
    "buddy-buddy poffin": 8,
    "evolution incense": 7,
    "pokemon communication": 7,
    "hisuian heavy ball": 6,
    "irida": 8,
    "arven": 9,
    "capturing aroma": 6,
    "great ball": 6,
    "poke ball": 4,
}

ENERGY_ACCELERATION_CARDS: Final[dict[str, int]] = {
    "elesa's sparkle": 8,
    "melony": 8,
    "bede": 6,
    "dark patch": 9,
    "metal saucer": 9,
    "welder": 10,
    "magma basin": 7,
    "mirage gate": 9,
    "energy switch": 7,
    "earthen vessel": 8,
}

DISRUPTION_CARDS: Final[dict[str, int]] = {
    "boss's orders": 10,
    "counter catcher": 8,
    "prime catcher": 9,
    "cross switcher": 7,
    "lost vacuum": 8,
    "crushing hammer": 6,
    "enhanced hammer": 7,
    "team yell's cheer": 5,
    "reset stamp": 9,
    "guzma": 10,
    "lysandre": 10,
}

STADIUM_CARDS: Final[dict[str, int]] = {
    "path to the peak": 9,
    "lost city": 8,
    "temple of sinnoh": 7,
    "collapsed stadium": 6,
    "magma basin": 7,
    "training court": 6,
    "artazon": 7,
    "beach court": 5,
}

TRAINER_TABLES: Final[dict[str, dict[str, int]]] = {
    "draw": DRAW_SUPPORTERS,
    "search": SEARCH_CARDS,
    "energy_acceleration": ENERGY_ACCELERATION_CARDS,
    "disruption": DISRUPTION_CARDS,
    "stadium": STADIUM_CARDS,
}

# =============================================================================
# Name keyword groups
# =============================================================================

ENERGY_ACCELERATION_BY_TYPE: Final[dict[str, tuple[str, ...]]] = {
    "Water": ("melony", "baxcalibur", "frosmoth", "palkia vstar"),
    "Fire": ("magma basin", "charizard ex", "delphox v", "entei v", "welder"),
    "Psychic": ("gardevoir ex", "bede", "shadow rider calyrex"),
    "Lightning": ("flaaffy", "elesa's sparkle", "zeraora"),
    "Darkness": ("dark patch", "galarian moltres v", "darkrai vstar"),
    "Metal": ("metal saucer", "magnezone", "bronzong"),
    "Grass": ("cherrim", "rillaboom", "tsareena ex"),
    "Fighting": ("gutsy pickaxe", "garchomp ex", "koraidon ex"),
    "Colorless": ("double turbo energy", "twin energy", "triple acceleration energy"),
}

ACCELERATION_KEYWORDS: Final = (
    "elesa",
    "melony",
    "dark patch",
    "mirage gate",
    "metal saucer",
    "welder",
    "frosmoth",
    "flaaffy",
    "magma basin",
    "archeops",
    "twin energy",
    "double turbo",
    "triple acceleration",
)

EVOLUTION_HELPERS: Final = ("rare candy", "evolution incense", "evosoda", "wally")

SEARCH_KEYWORDS: Final = ("ball", "communication", "vip pass", "poffin", "radar", "arven", "irida")

SWITCH_KEYWORDS: Final = ("switch", "escape rope", "rope", "bird keeper", "float stone", "jet energy")

RECOVERY_KEYWORDS: Final = (
    "rescue",
    "ordinary rod",
    "super rod",
    "brock",
    "energy retrieval",
    "pal pad",
    "night stretcher",
    "energy recycler",
)

GUST_KEYWORDS: Final = ("boss", "guzma", "lysandre", "cross switcher", "catcher")

STATUS_KEYWORDS: Final = ("paralyzed", "asleep", "confused", "burned", "poisoned")

# Low-count cards included for specific matchups
TECH_CARD_NAMES: Final = (
    "spiritomb",
    "radiant",
    "manaphy",
    "drapion v",
    "hawlucha",
    "canceling cologne",
    "lost city",
    "path to the peak",
    "temple of sinnoh",
    "klefki",
    "mimikyu",
    "jirachi",
    "mew",
    "snorlax",
    "yveltal",
)

# Tag -> names whose presence gives a card that synergy tag
SYNERGY_TAG_NAMES: Final[dict[str, tuple[str, ...]]] = {
    "water_engine": ("baxcalibur", "irida", "superior energy retrieval", "melony"),
    "psychic_engine": ("gardevoir ex", "fog crystal", "bede"),
    "fire_engine": ("charizard ex", "magma basin", "entei v"),
    "lost_zone": ("comfey", "colress's experiment", "mirage gate", "sableye", "lost city"),
    "evolution_support": ("rare candy", "evolution incense", "irida", "evosoda"),
    "draw_engine": ("bibarel", "pidgeot ex", "radiant greninja", "lumineon v", "kirlia"),
    "colorless_energy": ("double turbo energy", "twin energy", "jet energy"),
}

# Cards that put cards into the discard pile on purpose
DISCARD_ENABLER_NAMES: Final = (
    "professor's research",
    "ultra ball",
    "quick ball",
    "radiant greninja",
    "superior energy retrieval",
    "earthen vessel",
    "battle compressor",
)

# Cards that get value out of the discard pile
DISCARD_PAYOFF_NAMES: Final = (
    "dark patch",
    "magma basin",
    "metal saucer",
    "melony",
    "energy retrieval",
    "super rod",
    "night stretcher",
    "welder",
)

# Fixed importance for format staples in the synergy graph
STAPLE_IMPORTANCE: Final[dict[str, int]] = {
    "professor's research": 90,
    "quick ball": 85,
    "ultra ball": 85,
    "rare candy": 85,
    "battle vip pass": 80,
    "boss's orders": 80,
    "iono": 80,
    "nest ball": 75,
}

# =============================================================================
# Card quality (1-10)
# =============================================================================

CARD_QUALITY: Final[dict[str, int]] = {
    # Draw
    "professor's research": 10,
    "iono": 9,
    "colress's experiment": 9,
    "marnie": 9,
    "n": 9,
    "cynthia": 8,
    "judge": 6,
    "lillie": 6,
    "hop": 7,
    "bianca": 7,
    "tate & liza": 4,
    # Search
    "ultra ball": 10,
    "quick ball": 10,
    "battle vip pass": 10,
    "nest ball": 9,
    "level ball": 9,
    "buddy-buddy poffin": 8,
    "arven": 9,
    "irida": 8,
    "evolution incense": 7,
    "pokemon communication": 7,
    "great ball": 6,
    "poke ball": 4,
    "friend ball": 4,
    # Acceleration
    "dark patch": 9,
    "metal saucer": 9,
    "welder": 10,
    "elesa's sparkle": 8,
    "melony": 8,
    "energy switch": 7,
    "earthen vessel": 8,
    "energy search": 3,
    # Disruption
    "boss's orders": 10,
    "prime catcher": 9,
    "counter catcher": 8,
    "reset stamp": 9,
    "lost vacuum": 8,
    "cross switcher": 7,
    "enhanced hammer": 7,
    "crushing hammer": 6,
    # Stadiums
    "path to the peak": 9,
    "lost city": 8,
    "temple of sinnoh": 7,
    "magma basin": 7,
    "collapsed stadium": 6,
    "training court": 6,
    # Utility
    "rare candy": 9,
    "switch": 7,
    "escape rope": 7,
    "switch cart": 7,
    "super rod": 6,
    "night stretcher": 7,
    "ordinary rod": 5,
    "pal pad": 5,
    "energy retrieval": 6,
    "superior energy retrieval": 8,
    "potion": 2,
    # Tools
    "float stone": 9,
    "choice belt": 8,
    "defiance band": 7,
    "forest seal stone": 9,
    "big charm": 7,
    "rescue board": 7,
    # Special energy
    "double turbo energy": 8,
    "twin energy": 9,
    "triple acceleration energy": 8,
    "jet energy": 7,
    "gift energy": 7,
    "reversal energy": 7,
    "capture energy": 7,
    "heal energy": 3,
}

BASIC_ENERGY_QUALITY: Final = 7

# =============================================================================
# Deck building
# =============================================================================

HP_THRESHOLDS: Final[dict[str, int]] = {
    "vstar_vmax": 280,
    "ex_v": 220,
    "stage_2": 170,
    "stage_1": 130,
    "basic": 90,
}

RECOMMENDED_RATIOS: Final[dict[str, tuple[int, int, int]]] = {
    # (min, max, optimal)
    "pokemon": (12, 20, 15),
    "trainers": (25, 40, 32),
    "energy": (8, 18, 13),
}

RECOMMENDED_ENERGY_PERCENT: Final = (15.0, 25.0)

OHKO_DAMAGE: Final = 280
TWO_HIT_KO_DAMAGE: Final = 140


def name_in(name: str, keywords: tuple[str, ...]) -> bool:
    """True when any keyword is a substring of the lowercased card name."""
    lowered = name.lower()
    return any(keyword in lowered for keyword in keywords)
