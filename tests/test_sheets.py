from __future__ import annotations

import pytest

from image_analyzer.core.errors import MissingDestination
from image_analyzer.core.sheets import NOT_IMPLEMENTED_NOTICE, save_to_sheets


@pytest.mark.parametrize("url", ["", "   "])
def test_empty_url_raises(url):
    with pytest.raises(MissingDestination) as info:
        save_to_sheets(url)

    assert info.value.user_message == "Please enter a Google Sheets URL"


def test_url_reports_not_implemented():
    assert save_to_sheets("https://sheets.example/doc") == NOT_IMPLEMENTED_NOTICE
