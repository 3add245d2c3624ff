"""Shallow deck legality checks.

This is not a rules engine: it covers deck size, the Basic Pokemon
requirement, copy limits, ban lists and the per-card format flags.
"""

from __future__ import annotations

from collections.abc import Iterable

from ptcg_core.classifier import is_basic_energy
from ptcg_core.config import get_settings
from ptcg_core.data.knowledge import RECOMMENDED_RATIOS
from ptcg_core.data.meta_snapshot import MetaSnapshot, get_meta_snapshot
from ptcg_core.data.models.card import CardFace, Deck
from ptcg_core.data.models.responses import DeckLegality, LegalityIssue

# Any number of cards named Arceus may be played
UNLIMITED_NAMES = ("arceus",)

MAX_SPECIAL_ENERGY = 8


def deck_size_issue(total_cards: int, deck_size: int) -> LegalityIssue | None:
    if total_cards == deck_size:
        return None
    if total_cards < deck_size:
        suggestion = f"Add {deck_size - total_cards} more cards"
    else:
        suggestion = f"Remove {total_cards - deck_size} cards"
    return LegalityIssue(
        kind="deck_size",
        message=f"Deck has {total_cards} cards, must have exactly {deck_size}",
        suggestion=suggestion,
    )


def _copy_limit_exempt(card: CardFace) -> bool:
    if is_basic_energy(card):
        return True
    lowered = card.name.lower()
    return any(name in lowered for name in UNLIMITED_NAMES)


def composition_advisories(deck: Deck) -> list[str]:
    """Non-blocking ratio advice for a full-size deck."""
    settings = get_settings()
    if deck.total_cards != settings.deck_size:
        return []

    pokemon = deck.count(lambda c: c.is_pokemon)
    trainers = deck.count(lambda c: c.is_trainer)
    energy = deck.count(lambda c: c.is_energy)
    basic_energy = deck.count(is_basic_energy)
    special_energy = energy - basic_energy

    pokemon_min, pokemon_max, _ = RECOMMENDED_RATIOS["pokemon"]
    trainer_min, _, _ = RECOMMENDED_RATIOS["trainers"]
    energy_min, energy_max, _ = RECOMMENDED_RATIOS["energy"]

    advisories: list[str] = []
    if pokemon < pokemon_min - 2:
        advisories.append(f"Very low Pokemon count ({pokemon}); most decks run {pokemon_min}-{pokemon_max}")
    elif pokemon > pokemon_max + 5:
        advisories.append(f"Very high Pokemon count ({pokemon}); most decks run {pokemon_min}-{pokemon_max}")
    if trainers < trainer_min:
        advisories.append(f"Low Trainer count ({trainers}); most competitive decks run 28-35")
    if energy < energy_min and basic_energy < 6:
        advisories.append(f"Very low Energy count ({energy}); most decks need at least 10")
    elif energy > energy_max + 2:
        advisories.append(f"High Energy count ({energy}); most decks run 10-15")
    if special_energy > MAX_SPECIAL_ENERGY:
        advisories.append(f"High Special Energy count ({special_energy}); consider more basic Energy")
    return advisories


def validate_deck(
    deck: Deck,
    snapshot: MetaSnapshot | None = None,
    format_name: str = "standard",
    input_issues: Iterable[str] = (),
) -> DeckLegality:
    """Check a deck against the shallow legality rules.

    ``input_issues`` are entries rejected during input normalisation; they
    are reported as malformed-entry issues and make the deck illegal.
    """
    settings = get_settings()
    snapshot = snapshot or get_meta_snapshot()
    issues: list[LegalityIssue] = []

    size_issue = deck_size_issue(deck.total_cards, settings.deck_size)
    if size_issue is not None:
        issues.append(size_issue)

    for problem in input_issues:
        issues.append(
            LegalityIssue(
                kind="malformed",
                message=f"Malformed deck entry: {problem}",
                suggestion="Fix or remove the entry",
            )
        )

    if not any(entry.card.is_basic_pokemon for entry in deck.entries):
        issues.append(
            LegalityIssue(
                kind="no_basic",
                message="Deck must contain at least one Basic Pokemon",
                suggestion="Add Basic Pokemon cards to your deck",
            )
        )

    first_by_name: dict[str, CardFace] = {}
    for entry in deck.entries:
        first_by_name.setdefault(entry.card.name, entry.card)

    for name, quantity in sorted(deck.quantity_by_name().items()):
        card = first_by_name[name]
        if quantity > settings.max_copies and not _copy_limit_exempt(card):
            issues.append(
                LegalityIssue(
                    kind="copy_limit",
                    card=name,
                    message=f"{name} has {quantity} copies, maximum allowed is {settings.max_copies}",
                    suggestion=f"Remove {quantity - settings.max_copies} copies of {name}",
                )
            )

    banned = {name.lower() for name in snapshot.banned_in(format_name)}
    legal_flag = "is_legal_standard" if format_name.lower() == "standard" else "is_legal_expanded"
    for name in sorted(first_by_name):
        card = first_by_name[name]
        if name.lower() in banned:
            issues.append(
                LegalityIssue(
                    kind="banned",
                    card=name,
                    message=f"{name} is banned in {format_name.title()}",
                    suggestion=f"Remove {name} and replace with a legal card",
                )
            )
        elif not getattr(card, legal_flag):
            issues.append(
                LegalityIssue(
                    kind="format",
                    card=name,
                    message=f"{name} is not legal in {format_name.title()}",
                    suggestion=f"Replace {name} with a {format_name.title()}-legal card",
                )
            )

    return DeckLegality(
        is_legal=not issues,
        format=format_name.lower(),
        total_cards=deck.total_cards,
        issues=issues,
        advisories=composition_advisories(deck),
    )
