"""Shared fixtures for anydiff tests."""

import pytest

from anydiff.entries import Block, Line
from anydiff.filters import Filter
from anydiff.marked_string import MarkedString
from anydiff.parameters import ContentType
from anydiff.task import DiffTask


@pytest.fixture
def lorem_task():
    """Fixture providing a text comparison with a single changed word."""
    return DiffTask("Lorem ipsum dolor", "Lorem consectetur dolor", "a.txt", "b.txt")


@pytest.fixture
def lorem_diff(lorem_task):
    """Fixture providing the result of the single-word comparison."""
    return lorem_task.run()


@pytest.fixture
def lorem_line():
    """Fixture providing a changed line attached to a block."""
    block = Block()
    line = Line(
        MarkedString("Lorem {{del}}ipsum{{/}} dolor"),
        MarkedString("Lorem {{ins}}consectetur{{/}} dolor"),
    )
    block.add_line(line)
    return line


@pytest.fixture
def html_pair():
    """Fixture providing two HTML documents that differ in one attribute value."""
    return '<p class="red">x</p>', '<p class="blue">x</p>'


@pytest.fixture
def make_rule():
    """Fixture building a rule whose named predicates answer True."""
    def factory(*names, raises=False):
        class Rule(Filter):
            pass

        for name in names:
            if raises:
                def predicate(self, value):
                    raise RuntimeError("broken rule")
            else:
                def predicate(self, value):
                    return True
            setattr(Rule, name, predicate)
        return Rule()

    return factory


@pytest.fixture
def html_type():
    """Fixture providing the HTML content type."""
    return ContentType.HTML
