# ruikit/tests/helpers.py

"""Shared fixtures: an error-log collector and small theme builders."""

import unittest
from typing import List

from ruikit import log
from ruikit.resolver import ThemeResolver
from ruikit.theme import Theme, create_theme_from_text


class ErrorLogTestCase(unittest.TestCase):
    """Collects everything sent to the error hook in ``self.errors``."""

    def setUp(self):
        self.errors: List[str] = []
        log.set_error_log(self.errors.append)
        self.addCleanup(log.set_error_log, None)


def resolver_for(text: str = "", **kwargs) -> ThemeResolver:
    """A resolver whose only theme is the given theme text."""
    theme = create_theme_from_text(text) if text else Theme()
    assert theme is not None, text
    return ThemeResolver(theme, **kwargs)
