"""Tests for rename masks"""

import random
from datetime import datetime

from s3ferry.constants import DEFAULT_MASK
from s3ferry.template import TOKEN_RE, render, split_name

NOW = datetime(2024, 3, 5, 7, 8, 9, 123456)


class TestSplitName:
    """Tests for split_name"""

    def test_forward_slash(self):
        """Test the last path component is used"""
        assert split_name("a/b/teste.txt") == ("teste", ".txt")

    def test_backslash(self):
        """Test Windows separators are honoured on every platform"""
        assert split_name("c:\\dir\\teste.txt") == ("teste", ".txt")

    def test_no_extension(self):
        """Test a name without a dot has an empty extension"""
        assert split_name("folder/README") == ("README", "")

    def test_last_dot_wins(self):
        """Test only the last dot starts the extension"""
        assert split_name("backup.tar.gz") == ("backup.tar", ".gz")

    def test_dot_in_directory_is_ignored(self):
        """Test dots in directory names do not count"""
        assert split_name("v1.2/notes") == ("notes", "")


class TestRender:
    """Tests for render"""

    def test_file_name_token(self):
        """Test #FN is the base name without extension"""
        assert render("a/b/teste.txt", "#FN", now=NOW) == "teste"
        assert render("c:\\teste.txt", "#FN", now=NOW) == "teste"

    def test_day_of_year(self):
        """Test #DJ is the unpadded day of the year"""
        yday = NOW.timetuple().tm_yday
        assert render("abc.txt", "#FN_#DJ#FE", now=NOW) == f"abc_{yday}.txt"
        assert render("abc.txt", "#DJ", now=NOW) == "65"

    def test_date_and_time_tokens(self):
        """Test the date and time tokens are zero-padded"""
        result = render("x", "#DY-#YY-#DM-#DD #TH:#TM:#TS.#TU", now=NOW)
        assert result == "2024-24-03-05 07:08:09.123"

    def test_compact_timestamp(self):
        """Test #SP renders the full timestamp with microseconds"""
        assert render("x", "#SP", now=NOW) == "20240305070809123456"

    def test_empty_mask_uses_default(self):
        """Test an empty mask keeps the original name"""
        assert DEFAULT_MASK == "#FN#FE"
        assert render("dir/data.csv", "", now=NOW) == "data.csv"
        assert render("dir/data.csv", None, now=NOW) == "data.csv"

    def test_literal_text_passes_through(self):
        """Test unknown tokens and plain text are copied unchanged"""
        assert render("f.log", "archive/#XX/#FN", now=NOW) == "archive/#XX/f"

    def test_repeated_tokens(self):
        """Test a token may appear more than once"""
        assert render("f.log", "#FN-#FN#FE", now=NOW) == "f-f.log"

    def test_substituted_text_is_not_expanded(self):
        """Test a file name containing a token is not rendered again"""
        assert render("#DY.txt", "#FN#FE", now=NOW) == "#DY.txt"

    def test_random_tokens_are_padded(self):
        """Test the random tokens keep their width"""
        rng = random.Random(7)
        result = render("f", "#R1|#R2|#R4", now=NOW, rng=rng)
        one, two, four = result.split("|")
        assert len(one) == 1 and one.isdigit()
        assert len(two) == 2 and two.isdigit()
        assert len(four) == 4 and four.isdigit()

    def test_pure_with_frozen_inputs(self):
        """Test the same time and seed give the same name"""
        first = render("f.bin", "#FN_#SP_#R4#FE", now=NOW, rng=random.Random(42))
        second = render("f.bin", "#FN_#SP_#R4#FE", now=NOW, rng=random.Random(42))
        assert first == second

    def test_defaults_to_current_time(self):
        """Test the current year is used when no time is given"""
        assert render("f", "#DY") == datetime.now().strftime("%Y")


class TestTokenPattern:
    """Tests for the token expression"""

    def test_every_documented_token_is_recognized(self):
        """Test the expression knows all fifteen tokens"""
        tokens = "#DY#YY#DM#DD#DJ#TH#TM#TS#TU#SP#FN#FE#R1#R2#R4"
        assert len(TOKEN_RE.findall(tokens)) == 15
