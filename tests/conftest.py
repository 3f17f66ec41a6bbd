"""Shared fixtures: a small two-layer analysis and the indices built over it."""

import pytest

from diveweb.query import QueryFacade
from tests.helpers import sample_analysis


@pytest.fixture
def analysis():
    return sample_analysis()


@pytest.fixture
def facade(analysis):
    return QueryFacade.from_analysis(analysis)
