import unittest

from bs4 import BeautifulSoup

from kepub.utils.errors import ValidationError
from kepub.utils.kobo_structure import KOBO_STYLE_CSS, add_kobo_divs, add_kobo_styles


class TestKoboDivs(unittest.TestCase):
    def test_wraps_body_children_in_order(self):
        soup = BeautifulSoup("<html><head></head><body><h1>T</h1>text<p>One</p><p>Two</p></body></html>", "html.parser")

        self.assertTrue(add_kobo_divs(soup))

        body = soup.body
        self.assertEqual(len(body.contents), 1)
        columns = body.contents[0]
        self.assertEqual(columns.name, "div")
        self.assertEqual(columns.get_attribute_list("class"), ["book-columns"])
        self.assertEqual(len(columns.contents), 1)
        inner = columns.contents[0]
        self.assertEqual(inner.get_attribute_list("class"), ["book-inner"])
        self.assertEqual(
            "".join(str(c) for c in inner.contents),
            "<h1>T</h1>text<p>One</p><p>Two</p>",
        )

    def test_skips_when_divs_outnumber_paragraphs(self):
        html = "<html><head></head><body><div>a</div><div>b</div><p>c</p></body></html>"
        soup = BeautifulSoup(html, "html.parser")

        self.assertFalse(add_kobo_divs(soup))
        self.assertEqual(str(soup), html)

    def test_wraps_when_counts_are_equal(self):
        soup = BeautifulSoup("<html><body><div><p>a</p></div></body></html>", "html.parser")

        self.assertTrue(add_kobo_divs(soup))
        self.assertIsNotNone(soup.find("div", class_="book-columns"))

    def test_empty_body_is_left_alone(self):
        soup = BeautifulSoup("<html><head></head><body>  </body></html>", "html.parser")

        self.assertFalse(add_kobo_divs(soup))
        self.assertIsNone(soup.find("div"))


class TestKoboStyles(unittest.TestCase):
    def test_appends_single_style_to_head(self):
        soup = BeautifulSoup("<html><head><title>x</title></head><body></body></html>", "html.parser")

        add_kobo_styles(soup)

        head = soup.head
        self.assertEqual(len(head.contents), 2)
        style = head.contents[-1]
        self.assertEqual(style.name, "style")
        self.assertEqual(style["type"], "text/css")
        self.assertEqual(style.string, KOBO_STYLE_CSS)
        self.assertEqual(
            str(style),
            '<style type="text/css">div#book-inner{margin-top: 0;margin-bottom: 0;}</style>',
        )

    def test_missing_head_raises(self):
        soup = BeautifulSoup("<body><p>x</p></body>", "html.parser")

        with self.assertRaises(ValidationError) as ctx:
            add_kobo_styles(soup)
        self.assertIn("could not append kobo styles", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
