"""Tests for amount candidate scoring."""

import pytest
from decimal import Decimal

from beleg_parser.locales import DE_AT
from beleg_parser.parsers.scoring import (
    AmountCandidate, ScoringContext, score_amount_candidate, rank_candidates, select_best_candidate
)


def make_context(window: str, lead_in: str = "", trail: str = "", relative_position: float = 0.0):
    return ScoringContext(
        window=window,
        lead_in=lead_in,
        trail=trail,
        relative_position=relative_position,
        total_keywords=DE_AT.total_keywords,
        currency_symbols=DE_AT.currency_symbols,
        currency_codes=DE_AT.currency_codes,
    )


class TestScoreAmountCandidate:
    """Test suite for score_amount_candidate."""

    def test_keyword_symbol_and_position(self):
        """Test the combined bonuses for a typical total line."""
        candidate = AmountCandidate(value=Decimal("123.45"), matched_span="€ 123,45", position=14)
        context = make_context("gesamtbetrag: € 123,45", relative_position=0.5)

        score = score_amount_candidate(candidate, context)

        assert score == pytest.approx(50 + 25 + 7.5 + 1.2345)

    def test_keyword_counted_once(self):
        """Test that several total keywords still give a single bonus."""
        candidate = AmountCandidate(value=Decimal("10.00"), matched_span="10,00", position=0)
        one = score_amount_candidate(candidate, make_context("summe 10,00"))
        many = score_amount_candidate(candidate, make_context("gesamtsumme total brutto 10,00"))

        assert one == many

    def test_symbol_must_be_near_number(self):
        """Test that a currency symbol far away does not count as attached."""
        candidate = AmountCandidate(value=Decimal("10.00"), matched_span="10,00", position=40)
        near = make_context("x 10,00", lead_in="preis: € ")
        far = make_context("€ " + "x" * 30 + " 10,00", lead_in="xxxxxxxxx ")

        assert score_amount_candidate(candidate, near) - score_amount_candidate(candidate, far) == pytest.approx(25)

    def test_symbol_after_number(self):
        candidate = AmountCandidate(value=Decimal("10.00"), matched_span="10,00", position=0)
        context = make_context("10,00 €", trail=" €")

        assert score_amount_candidate(candidate, context) == pytest.approx(25 + 0.1)

    def test_currency_code_is_word_bounded(self):
        """Test that 'eur' inside another word is not a currency code."""
        candidate = AmountCandidate(value=Decimal("150"), matched_span="150 EUR", position=0)

        assert score_amount_candidate(candidate, make_context("150 eur")) == pytest.approx(15 + 1.5)
        assert score_amount_candidate(candidate, make_context("europaplatz 150")) == pytest.approx(1.5)

    def test_small_value_penalties(self):
        """Test penalties for values below 1 and below 5."""
        context = make_context("")
        below_one = AmountCandidate(value=Decimal("0.50"), matched_span="0,50", position=0)
        below_five = AmountCandidate(value=Decimal("4.00"), matched_span="4,00", position=0)

        assert score_amount_candidate(below_one, context) == pytest.approx(-20 + 0.005)
        assert score_amount_candidate(below_five, context) == pytest.approx(-10 + 0.04)

    def test_magnitude_bonus_is_capped(self):
        context = make_context("")
        candidate = AmountCandidate(value=Decimal("5000.00"), matched_span="5.000,00", position=0)

        assert score_amount_candidate(candidate, context) == pytest.approx(8.0)


class TestScoringContext:
    """Test suite for cutting scoring windows out of the text."""

    def test_from_text_windows(self):
        text = "x" * 200 + "Summe € 12,50" + "y" * 100
        position = text.index("12,50")
        candidate = AmountCandidate(value=Decimal("12.50"), matched_span="12,50", position=position)

        context = ScoringContext.from_text(text, candidate, DE_AT)

        assert len(context.window) == 150 + len("12,50") + 80
        assert context.window == context.window.lower()
        assert context.lead_in.endswith("€ ")
        assert context.has_total_keyword()
        assert context.symbol_near(candidate.matched_span)
        assert context.relative_position == pytest.approx(position / len(text))


class TestRanking:
    """Test suite for candidate ranking and selection."""

    def test_highest_score_wins(self):
        low = AmountCandidate(value=Decimal("900"), matched_span="900,00", position=0, score=10)
        high = AmountCandidate(value=Decimal("12"), matched_span="12,00", position=5, score=80)

        assert select_best_candidate([low, high]) is high

    def test_tie_prefers_larger_value(self):
        small = AmountCandidate(value=Decimal("10"), matched_span="10,00", position=0, score=50)
        large = AmountCandidate(value=Decimal("20"), matched_span="20,00", position=9, score=50)

        assert select_best_candidate([small, large]) is large

    def test_tie_prefers_earliest_position(self):
        first = AmountCandidate(value=Decimal("10"), matched_span="10,00", position=3, score=50)
        second = AmountCandidate(value=Decimal("10"), matched_span="10,00", position=30, score=50)

        assert select_best_candidate([second, first]) is first
        assert rank_candidates([second, first]) == [first, second]

    def test_empty(self):
        assert select_best_candidate([]) is None
        assert rank_candidates([]) == []
