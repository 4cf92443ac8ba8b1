import pytest

from feedviewer.search import FuzzyMatcher, anchor_starts, looks_like_sku, substring_score


class TestLooksLikeSku:
    @pytest.mark.parametrize("query", ["83B-147V00WT", "B31P012", "chair-9", "ab-c"])
    def test_sku_shapes(self, query):
        assert looks_like_sku(query)

    @pytest.mark.parametrize("query", ["chair", "ABCDE", "A12", "garden chair 2", ""])
    def test_free_text(self, query):
        assert not looks_like_sku(query)


class TestSubstringScore:
    def test_exact_substring_is_perfect(self):
        assert substring_score("chair", "outdoor folding chair set") == 0.0

    def test_empty_query_matches_everything(self):
        assert substring_score("", "anything") == 0.0

    def test_empty_text_matches_nothing(self):
        assert substring_score("chair", "") == 1.0

    def test_typo_scores_close(self):
        assert substring_score("chair", "outdoor folding chiar set") < 0.3

    def test_unrelated_text_scores_far(self):
        assert substring_score("widget", "table") > 0.3


class TestFuzzyMatcher:
    def test_ranking_and_threshold(self, make_product):
        items = [
            make_product("A-1", title="Blue Wodget"),
            make_product("A-2", title="Widget Pro"),
            make_product("A-3", title="Table"),
        ]
        results = FuzzyMatcher(["title"]).search(items, "widget")
        assert [p.title for p in results] == ["Widget Pro", "Blue Wodget"]

    def test_best_key_counts(self, make_product):
        item = make_product("A-1", title="Lamp", short_description="Brass reading lamp")
        matcher = FuzzyMatcher(["title", "short_description"])
        assert matcher.score(item, "reading") == 0.0

    def test_ties_keep_input_order(self, make_product):
        items = [make_product(f"A-{i}", title="Garden Chair") for i in range(3)]
        results = FuzzyMatcher(["title"]).search(items, "chair")
        assert [p.sku for p in results] == ["A-0", "A-1", "A-2"]

    def test_blank_query_returns_nothing(self, make_product):
        assert FuzzyMatcher(["title"]).search([make_product("A-1")], "  ") == []

    def test_custom_threshold(self, make_product):
        items = [make_product("A-1", title="Blue Wodget")]
        assert FuzzyMatcher(["title"], threshold=0.0).search(items, "widget") == []


class TestAnchoring:
    def test_windows_start_where_bigrams_line_up(self):
        assert anchor_starts("widget", "blue wodget") == [4]

    def test_transposed_letters_still_anchor(self):
        assert 16 in anchor_starts("chair", "outdoor folding chiar set")

    def test_scattered_bigrams_are_rejected(self):
        text = "sturdy steel frame with powder coated finish"
        assert anchor_starts("zebra striped", text) == []
        assert substring_score("zebra striped", text) == 1.0

    def test_single_character_query(self):
        assert anchor_starts("z", "sturdy steel frame") == []
