"""Tests for similar-merchant detection."""

import pytest

from finance_ledger.processing.similarity import find_similar, is_similar, normalize_description


class TestNormalizeDescription:
    """Tests for normalize_description."""

    @pytest.mark.parametrize(
        "description,expected",
        [
            ("COSTCO #1234", "costco"),
            ("Costco #5678", "costco"),
            ("SHELL OIL 12345", "shell oil"),
            ("SQ *BLUE BOTTLE COFFEE OAKLAND", "sq blue bottle"),
            ("  AMAZON   MKTPLACE   PMTS ", "amazon mktplace pmts"),
            ("12345 #", ""),
        ],
    )
    def test_normalization(self, description: str, expected: str) -> None:
        assert normalize_description(description) == expected


class TestIsSimilar:
    """Tests for is_similar."""

    def test_equal(self) -> None:
        assert is_similar("costco", "costco")

    def test_containment_either_way(self) -> None:
        assert is_similar("amazon", "amazon mktplace pmts")
        assert is_similar("amazon mktplace pmts", "amazon")

    def test_unrelated(self) -> None:
        assert not is_similar("costco", "safeway")

    def test_empty_matches_everything(self) -> None:
        """An empty normalized description is a substring of any other."""
        assert is_similar("", "costco")


class TestFindSimilar:
    """Tests for find_similar."""

    def test_same_merchant_different_store_numbers(self, txn) -> None:
        target = txn("COSTCO #1234", "-50")
        other = txn("Costco #5678", "-20")
        unrelated = txn("SAFEWAY 99", "-10")

        assert find_similar(target, [target, other, unrelated], "groceries") == [other]

    def test_shell_scenario(self, txn) -> None:
        """Three other SHELL OIL purchases match one being recategorized."""
        target = txn("SHELL OIL 12345", "-40")
        others = [txn("SHELL OIL 67890", "-35") for _ in range(3)]

        similar = find_similar(target, [target, *others], "transportation")

        assert similar == others

    def test_excludes_transactions_already_in_category(self, txn) -> None:
        target = txn("SHELL OIL 12345", "-40")
        done = txn("SHELL OIL 67890", "-35", category="transportation")
        pending = txn("SHELL OIL 11111", "-30")

        assert find_similar(target, [target, done, pending], "transportation") == [pending]

    def test_excludes_target_by_id(self, txn) -> None:
        target = txn("NETFLIX.COM", "-15.99")

        assert find_similar(target, [target], "entertainment") == []

    def test_pool_is_not_modified(self, txn) -> None:
        target = txn("COSTCO #1", "-1")
        pool = [target, txn("COSTCO #2", "-2")]

        find_similar(target, pool, "groceries")

        assert [t.category for t in pool] == ["other", "other"]
