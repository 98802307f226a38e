"""
Unit Tests for wordlist loading and candidate generation
"""

import pytest

from subsweep.scanner.candidates import build_candidates, load_wordlist, normalize_domain
from subsweep.util.errors import PreconditionError


class TestLoadWordlist:
    """Wordlist file handling"""

    def test_trims_and_skips_blank_lines(self, tmp_path):
        wordlist = tmp_path / 'words.txt'
        wordlist.write_text("www\n  mail  \n\n\t\napi\r\n")

        assert load_wordlist(wordlist) == ['www', 'mail', 'api']

    def test_keeps_duplicates_and_order(self, tmp_path):
        wordlist = tmp_path / 'words.txt'
        wordlist.write_text("b\na\nb\n")

        assert load_wordlist(wordlist) == ['b', 'a', 'b']

    def test_missing_file(self, tmp_path):
        with pytest.raises(PreconditionError, match="Error loading wordlist file"):
            load_wordlist(tmp_path / 'nope.txt')

    def test_empty_file(self, tmp_path):
        wordlist = tmp_path / 'empty.txt'
        wordlist.write_text("\n   \n")

        with pytest.raises(PreconditionError, match="contains no entries"):
            load_wordlist(wordlist)


class TestBuildCandidates:
    """Candidate names"""

    def test_joins_word_and_domain(self):
        assert build_candidates(['www', 'mail'], 'example.com') == ['www.example.com', 'mail.example.com']

    def test_normalizes(self):
        assert build_candidates(['WWW.', ' Api '], 'Example.COM.') == ['www.example.com', 'api.example.com']

    def test_multi_label_words(self):
        assert build_candidates(['dev.api'], 'example.com') == ['dev.api.example.com']

    def test_skips_words_that_normalize_to_nothing(self):
        assert build_candidates(['.', '  '], 'example.com') == []

    def test_normalize_domain(self):
        assert normalize_domain('  Example.COM. ') == 'example.com'
