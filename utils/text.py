import html

import bleach


def strip_markup(value: str) -> str:
    """
    Remove HTML tags from user text and trim it.

    bleach escapes the characters it leaves behind, so the result is
    unescaped again to store the text as the user typed it.
    """
    return html.unescape(bleach.clean(value or "", strip=True)).strip()
