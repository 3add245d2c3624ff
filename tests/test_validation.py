"""Tests for deck legality checks and input normalisation."""

from __future__ import annotations

import pytest
from factories import energy, make_deck, no_draw_deck, pokemon, short_deck, trainer

from ptcg_core.data.meta_snapshot import get_meta_snapshot
from ptcg_core.data.models.card import Deck
from ptcg_core.data.models.inputs import AnalyzeDeckInput, normalize_deck
from ptcg_core.exceptions import DeckInputError
from ptcg_core.validation import deck_size_issue, validate_deck


class TestDeckSize:
    """Tests for the deck size rule."""

    def test_exact_size_is_fine(self) -> None:
        assert deck_size_issue(60, 60) is None

    def test_short_deck_suggests_additions(self) -> None:
        issue = deck_size_issue(58, 60)
        assert issue is not None
        assert issue.suggestion == "Add 2 more cards"

    def test_long_deck_suggests_removals(self) -> None:
        issue = deck_size_issue(63, 60)
        assert issue is not None
        assert issue.suggestion == "Remove 3 cards"


class TestValidateDeck:
    """Tests for validate_deck."""

    def test_legal_deck(self) -> None:
        result = validate_deck(no_draw_deck())
        assert result.is_legal
        assert result.issues == []
        assert result.total_cards == 60

    def test_short_deck_has_single_issue(self) -> None:
        result = validate_deck(short_deck())
        assert not result.is_legal
        assert [issue.kind for issue in result.issues] == ["deck_size"]

    def test_copy_limit(self) -> None:
        deck = make_deck((pokemon("Pikachu"), 4), (trainer("Quick Ball"), 5), (energy(), 51))
        result = validate_deck(deck)
        kinds = {issue.kind: issue for issue in result.issues}
        assert "copy_limit" in kinds
        assert kinds["copy_limit"].card == "Quick Ball"
        assert kinds["copy_limit"].suggestion == "Remove 1 copies of Quick Ball"

    def test_basic_energy_is_exempt(self) -> None:
        """Any number of basic Energy is allowed."""
        deck = make_deck((pokemon("Pikachu"), 4), (energy(), 56))
        assert all(issue.kind != "copy_limit" for issue in validate_deck(deck).issues)

    def test_copies_counted_across_printings(self) -> None:
        """Copies with the same name but different ids share the limit."""
        deck = make_deck(
            (pokemon("Pikachu", id="pika-1"), 3),
            (pokemon("Pikachu", id="pika-2"), 3),
            (energy(), 54),
        )
        issues = validate_deck(deck).issues
        assert [issue.card for issue in issues if issue.kind == "copy_limit"] == ["Pikachu"]

    def test_no_basic_pokemon(self) -> None:
        deck = make_deck((trainer("Quick Ball"), 4), (energy(), 56))
        kinds = [issue.kind for issue in validate_deck(deck).issues]
        assert "no_basic" in kinds

    def test_banned_card(self) -> None:
        snapshot = get_meta_snapshot()
        banned = snapshot.banned_in("standard")[0]
        deck = make_deck((pokemon("Pikachu"), 4), (trainer(banned), 1), (energy(), 55))
        issues = validate_deck(deck, snapshot).issues
        assert [issue.kind for issue in issues] == ["banned"]
        assert issues[0].card == banned

    def test_format_flags(self) -> None:
        rotated = trainer("Old Item", is_legal_standard=False)
        deck = make_deck((pokemon("Pikachu"), 4), (rotated, 1), (energy(), 55))
        assert [issue.kind for issue in validate_deck(deck).issues] == ["format"]
        assert validate_deck(deck, format_name="expanded").is_legal

    def test_input_issues_are_reported(self) -> None:
        result = validate_deck(no_draw_deck(), input_issues=["entry #3: quantity -1 is negative"])
        assert not result.is_legal
        assert result.issues[0].kind == "malformed"

    def test_composition_advisories_only_for_full_decks(self) -> None:
        """Ratio advice only applies to a full-size deck."""
        lopsided = make_deck((pokemon("Pikachu"), 4), (energy(), 56))
        assert validate_deck(lopsided).advisories
        assert validate_deck(make_deck((pokemon("Pikachu"), 4), (energy(), 50))).advisories == []


class TestNormalizeDeck:
    """Tests for deck input normalisation."""

    def test_deck_passes_through(self) -> None:
        deck = no_draw_deck()
        assert normalize_deck(deck).deck is deck

    def test_pairs_and_mappings(self) -> None:
        card = pokemon("Pikachu")
        result = normalize_deck([(card, 4), {"card": trainer("Quick Ball"), "quantity": 2}])
        assert result.deck.total_cards == 6
        assert result.issues == []

    def test_raw_card_dicts(self) -> None:
        """Catalog-shaped dicts validate into cards, including camelCase aliases."""
        raw = {
            "card": {
                "id": "raichu-1",
                "name": "Raichu",
                "supertype": "Pokémon",
                "subtypes": ["Stage 1"],
                "hp": "120",
                "evolvesFrom": "Pikachu",
                "attacks": [{"name": "Thunder", "cost": ["Lightning", "Lightning"], "damage": "120+"}],
            },
            "quantity": 2,
        }
        result = normalize_deck([raw])
        card = result.deck.cards[0]
        assert card.is_pokemon
        assert card.hp == 120
        assert card.evolves_from == "Pikachu"
        assert card.max_damage == 120

    def test_zero_quantity_dropped_silently(self) -> None:
        result = normalize_deck([(pokemon("Pikachu"), 0), (pokemon("Zapdos"), 2)])
        assert result.deck.total_cards == 2
        assert result.dropped_zero_quantity == ["Pikachu"]
        assert result.issues == []

    def test_negative_quantity_reported(self) -> None:
        result = normalize_deck([(pokemon("Pikachu"), -1), (pokemon("Zapdos"), 2)])
        assert result.deck.total_cards == 2
        assert result.issues == ["Pikachu: quantity -1 is negative"]

    def test_malformed_card_reported(self) -> None:
        result = normalize_deck([{"card": {"name": "No Id"}, "quantity": 1}])
        assert result.deck.total_cards == 0
        assert len(result.issues) == 1

    def test_analyze_input_model(self) -> None:
        payload = AnalyzeDeckInput.model_validate({"entries": [{"card": pokemon("Pikachu"), "quantity": 4}]})
        assert normalize_deck(payload).deck.total_cards == 4

    @pytest.mark.parametrize("payload", [None, "4 Pikachu", {"card": "x"}, 42])
    def test_non_sequence_payload_raises(self, payload: object) -> None:
        with pytest.raises(DeckInputError):
            normalize_deck(payload)

    def test_empty_list_is_empty_deck(self) -> None:
        assert normalize_deck([]).deck == Deck()
