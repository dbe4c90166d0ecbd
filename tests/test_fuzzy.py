import pytest

from src.tickets.domain import fuzzy


def test_levenshtein_is_case_insensitive():
    assert fuzzy.levenshtein_distance("Account", "acount") == 1
    assert fuzzy.levenshtein_distance("", "abc") == 3
    assert fuzzy.levenshtein_distance("same", "SAME") == 0


def test_similarity_bounds():
    assert fuzzy.similarity("", "") == 1.0
    assert fuzzy.similarity(None, "x") == 0.0
    assert fuzzy.similarity("abc", "xyz") == 0.0
    assert fuzzy.similarity("account", "acount") == pytest.approx(1 - 1 / 7)


def test_tokenize_splits_on_punctuation():
    assert fuzzy.tokenize("Hello, world! How's it;going") == ["Hello", "world", "How's", "it", "going"]


def test_stop_words_include_short_tokens():
    assert fuzzy.is_stop_word("the")
    assert fuzzy.is_stop_word("ok")
    assert not fuzzy.is_stop_word("login")


def test_best_word_match_scores():
    assert fuzzy.find_best_word_match("login", ["cannot", "login"], 0.7) == 1.0
    # "print" covers 5/7 of "printer", below the containment ratio; similarity is 5/7
    assert fuzzy.find_best_word_match("print", ["printer"], 0.7) == pytest.approx(5 / 7)
    assert fuzzy.find_best_word_match("printe", ["printer"], 0.7) == 0.9
    assert fuzzy.find_best_word_match("zebra", ["printer"], 0.7) == 0.0


def test_short_query_words_need_higher_similarity():
    # "cat" vs "car" is 0.67; short words need 0.85
    assert fuzzy.find_best_word_match("cat", ["car"], 0.5) == pytest.approx(2 / 3)
    assert fuzzy.find_best_word_match("cat", ["car"], 0.6) == 0.0


def test_typo_query_matches():
    assert fuzzy.fuzzy_matches("login acount", "Cannot login to account")


def test_substring_always_matches():
    assert fuzzy.fuzzy_matches("to acc", "Cannot login to account")
    assert fuzzy.fuzzy_matches("LOGIN", "cannot login")


def test_two_content_words_both_required():
    assert not fuzzy.fuzzy_matches("login printer", "Cannot login to account")


def test_three_content_words_need_two_and_sixty_percent():
    target = "Payment gateway timeout during checkout"
    assert fuzzy.fuzzy_matches("paymnt gateway checkout", target)
    assert not fuzzy.fuzzy_matches("payment printer keyboard", target)


def test_stop_word_only_query_needs_every_word():
    assert fuzzy.fuzzy_matches("the of", "the history of it")
    assert not fuzzy.fuzzy_matches("the of", "the history")


def test_null_inputs_never_match():
    assert not fuzzy.fuzzy_matches(None, "x")
    assert not fuzzy.fuzzy_matches("x", None)


def test_relevance_prefers_title_hits():
    title_hit = fuzzy.calculate_relevance_score("login acount", "Cannot login to account", "help")
    desc_hit = fuzzy.calculate_relevance_score("login acount", "help", "Cannot login to account")
    assert title_hit > desc_hit > 0


def test_relevance_zero_below_half_content_words():
    # Accepted through whole-query substring, yet no content word matches on its own
    assert fuzzy.fuzzy_matches("gin scre", "login screen")
    assert fuzzy.calculate_relevance_score("gin scre", "login screen", None) == 0.0

    assert fuzzy.calculate_relevance_score("login printer keyboard", "login page", None) == 0.0


def test_relevance_null_inputs():
    assert fuzzy.calculate_relevance_score(None, "a", "b") == 0.0
    assert fuzzy.calculate_relevance_score("a", None, None) == 0.0
