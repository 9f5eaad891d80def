"""
tests/test_sanitize.py -- Regression tests for output escaping (CWE-79).

A login response echoes Username, Email and Birthday. If a client renders
them as HTML, markup smuggled into those fields must arrive inert.
"""

from datetime import date

from core.sanitize import escape_text, sanitize_login_user


class TestEscapeText:
    def test_script_tag_is_neutralized(self) -> None:
        assert escape_text("<script>alert(1)</script>") == "&lt;script&gt;alert(1)&lt;/script&gt;"

    def test_quotes_and_ampersand(self) -> None:
        assert escape_text("a\"b'c&d") == "a&quot;b&#x27;c&amp;d"

    def test_plain_text_unchanged(self) -> None:
        assert escape_text("alice@example.com") == "alice@example.com"

    def test_none_passes_through(self) -> None:
        assert escape_text(None) is None

    def test_date_rendered_iso(self) -> None:
        assert escape_text(date(1990, 5, 17)) == "1990-05-17"


class TestSanitizeLoginUser:
    def test_only_display_fields_are_escaped(self) -> None:
        user = {
            "Username": "<b>alice</b>",
            "Email": "a@example.com",
            "Birthday": "1990-05-17",
            "FavoriteMovies": ["<id>"],
        }
        clean = sanitize_login_user(user)
        assert clean["Username"] == "&lt;b&gt;alice&lt;/b&gt;"
        assert clean["FavoriteMovies"] == ["<id>"], "FavoriteMovies holds ids and is passed through"
        assert user["Username"] == "<b>alice</b>", "Input dict must not be mutated"
