"""Tests for environment-driven configuration."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from diveweb import config
from diveweb.index.flatten import SortOrder


def test_default_sort_order():
    with patch.object(config, "SORT_ORDER", "name"):
        assert config.get_sort_order() is SortOrder.BY_NAME


def test_size_sort_order():
    with patch.object(config, "SORT_ORDER", "size"):
        assert config.get_sort_order() is SortOrder.BY_SIZE_DESC


def test_invalid_sort_order():
    with patch.object(config, "SORT_ORDER", "bogus"):
        with pytest.raises(RuntimeError, match="Invalid SORT_ORDER"):
            config.get_sort_order()
