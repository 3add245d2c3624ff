"""Relation catalog for the synergy graph."""

from __future__ import annotations

from typing import Any

# Edge strengths by relation source
EVOLUTION_STRENGTH = 100
RARE_CANDY_STRENGTH = 80
TYPE_ACCELERATION_STRENGTH = 75
COLORLESS_ACCELERATION_STRENGTH = 60
DISCARD_STRENGTH = 55
BASIC_ENERGY_STRENGTH = 50
SWITCH_STRENGTH = 45
DRAW_ABILITY_STRENGTH = 40

# Graph thresholds
STRONG_EDGE = 60
CLUSTER_EDGE = 50
HIGH_IMPORTANCE_CLUSTER = 1.5
HEAVY_RETREAT = 3
MAX_CORE_ENGINE = 5

# (item name, target filter, strength, description)
# Filters: "basic", "hp70", "hp90", "pokemon", "evolution", "water"
SEARCH_TARGETS: list[tuple[str, str, int, str]] = [
    ("quick ball", "basic", 70, "Quick Ball finds Basic Pokemon"),
    ("battle vip pass", "basic", 70, "Battle VIP Pass benches Basic Pokemon on turn one"),
    ("nest ball", "basic", 65, "Nest Ball benches Basic Pokemon"),
    ("buddy-buddy poffin", "hp70", 65, "Buddy-Buddy Poffin benches small Basic Pokemon"),
    ("ultra ball", "pokemon", 60, "Ultra Ball finds any Pokemon"),
    ("level ball", "hp90", 55, "Level Ball finds Pokemon with 90 HP or less"),
    ("evolution incense", "evolution", 65, "Evolution Incense finds evolution Pokemon"),
    ("irida", "water", 60, "Irida finds Water Pokemon"),
    ("pokemon communication", "pokemon", 55, "Pokemon Communication swaps for any Pokemon"),
]

# Named pairings: both names must be present (substring match on lowercased names)
KNOWN_COMBOS: list[dict[str, Any]] = [
    {
        "source": "archeops",
        "target": "lugia vstar",
        "strength": 90,
        "relation": "accelerates",
        "desc": "Archeops attaches Special Energy for Lugia VSTAR",
    },
    {
        "source": "fusion strike energy",
        "target": "mew vmax",
        "strength": 85,
        "relation": "accelerates",
        "desc": "Fusion Strike Energy powers Mew VMAX",
    },
    {
        "source": "comfey",
        "target": "colress's experiment",
        "strength": 80,
        "relation": "combos-with",
        "desc": "Comfey and Colress's Experiment fill the Lost Zone",
    },
    {
        "source": "double turbo energy",
        "target": "arceus vstar",
        "strength": 80,
        "relation": "accelerates",
        "desc": "Double Turbo Energy powers Trinity Nova",
    },
    {
        "source": "pidgeot ex",
        "target": "charizard ex",
        "strength": 75,
        "relation": "searches",
        "desc": "Pidgeot ex finds Charizard ex pieces every turn",
    },
    {
        "source": "comfey",
        "target": "giratina vstar",
        "strength": 80,
        "relation": "combos-with",
        "desc": "Comfey enables Star Requiem",
    },
    {
        "source": "mirage gate",
        "target": "comfey",
        "strength": 75,
        "relation": "combos-with",
        "desc": "Mirage Gate pays off a full Lost Zone",
    },
    {
        "source": "baxcalibur",
        "target": "chien-pao ex",
        "strength": 85,
        "relation": "accelerates",
        "desc": "Baxcalibur attaches Water Energy for Chien-Pao ex",
    },
    {
        "source": "electric generator",
        "target": "miraidon ex",
        "strength": 75,
        "relation": "accelerates",
        "desc": "Electric Generator powers Lightning attackers",
    },
]

# (card name, target filter, strength, description) for cards that hurt their own deck
ANTI_SYNERGIES: list[tuple[str, str, int, str]] = [
    ("path to the peak", "rule_box_ability", 50, "Path to the Peak shuts off your own rule-box abilities"),
    ("collapsed stadium", "bench_sitter", 40, "Collapsed Stadium can discard your own bench support"),
    ("spiritomb", "basic_v_ability", 40, "Spiritomb blocks your own Basic V abilities"),
]
