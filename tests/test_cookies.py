# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from ceboelha.utils.cookies import (
    ACCESS_TOKEN_COOKIE,
    CookieOptions,
    build_clear_cookie_string,
    build_cookie_string,
    get_token_from_cookies,
    parse_cookies,
    secure_cookie_options,
)


class TestBuildCookie(unittest.TestCase):
    def test_attribute_order_is_fixed(self) -> None:
        options = CookieOptions(http_only=True, secure=True, same_site="strict", max_age=3600, path="/")
        self.assertEqual(
            build_cookie_string("t", "v", options),
            "t=v; HttpOnly; Secure; SameSite=strict; Max-Age=3600; Path=/",
        )

    def test_absent_options_emit_nothing(self) -> None:
        self.assertEqual(build_cookie_string("t", "v"), "t=v")
        self.assertEqual(
            build_cookie_string("t", "v", CookieOptions(domain="example.com")),
            "t=v; Domain=example.com",
        )

    def test_value_is_percent_encoded(self) -> None:
        self.assertEqual(build_cookie_string("t", "a b;c"), "t=a%20b%3Bc")
        self.assertEqual(build_cookie_string("t", "x-y_z.~"), "t=x-y_z.~")

    def test_clear_cookie_forces_empty_value_and_zero_max_age(self) -> None:
        options = secure_cookie_options(False)
        self.assertEqual(
            build_clear_cookie_string("t", options),
            "t=; HttpOnly; SameSite=lax; Max-Age=0; Path=/",
        )
        self.assertEqual(build_clear_cookie_string("t"), "t=; Max-Age=0")


class TestCookiePreset(unittest.TestCase):
    def test_development(self) -> None:
        options = secure_cookie_options(False)
        self.assertTrue(options.http_only)
        self.assertFalse(options.secure)
        self.assertEqual(options.same_site, "lax")
        self.assertEqual(options.path, "/")

    def test_production(self) -> None:
        options = secure_cookie_options(True)
        self.assertTrue(options.http_only)
        self.assertTrue(options.secure)
        self.assertEqual(options.same_site, "strict")


class TestParseCookies(unittest.TestCase):
    def test_simple_header(self) -> None:
        self.assertEqual(parse_cookies("a=1; b=2"), {"a": "1", "b": "2"})

    def test_empty_header(self) -> None:
        self.assertEqual(parse_cookies(None), {})
        self.assertEqual(parse_cookies(""), {})

    def test_malformed_pairs_are_skipped(self) -> None:
        self.assertEqual(parse_cookies("junk; a=1;; =x"), {"a": "1"})

    def test_value_keeps_later_equals_and_is_decoded(self) -> None:
        cookies = parse_cookies("t=abc==; u=%E2%9C%93; v=%zz")
        self.assertEqual(cookies["t"], "abc==")
        self.assertEqual(cookies["u"], "✓")
        self.assertEqual(cookies["v"], "%zz")

    def test_get_token(self) -> None:
        header = f"other=1; {ACCESS_TOKEN_COOKIE}=tok"
        self.assertEqual(get_token_from_cookies(header, ACCESS_TOKEN_COOKIE), "tok")
        self.assertIsNone(get_token_from_cookies(header, "missing"))
        self.assertIsNone(get_token_from_cookies(f"{ACCESS_TOKEN_COOKIE}=", ACCESS_TOKEN_COOKIE))
        self.assertIsNone(get_token_from_cookies(None, ACCESS_TOKEN_COOKIE))


if __name__ == "__main__":
    unittest.main()
