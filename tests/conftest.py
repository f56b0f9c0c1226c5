import itertools

import pytest

from ticketfilter.config import FilterConfiguration, FilterFieldConfig
from ticketfilter.manager import FilterManager
from ticketfilter.system import FilterSystem


@pytest.fixture
def ids():
    """Deterministic node ids: n1, n2, ..."""
    counter = itertools.count(1)
    return lambda: f"n{next(counter)}"


@pytest.fixture
def configuration():
    return FilterConfiguration(
        filters=[
            FilterFieldConfig(id="title", label="Title", filter_type="text"),
            FilterFieldConfig(id="status", label="Status", filter_type="select"),
            FilterFieldConfig(id="updated_at", label="Updated", filter_type="date"),
            FilterFieldConfig(id="points", label="Points", filter_type="number"),
            FilterFieldConfig(id="tags", label="Tags", filter_type="multi-select"),
        ]
    )


@pytest.fixture
def system():
    return FilterSystem()


@pytest.fixture
def manager(configuration, ids):
    return FilterManager(configuration, id_factory=ids, strict=False)
