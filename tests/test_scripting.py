"""
Tests for JavaScript filter rules
"""
import logging

import pytest

from anydiff.entries import EntryType
from anydiff.filters import entry_filter
from anydiff.parameters import ContentType
from anydiff.scripting import (
    DIFF_PARAMETER,
    FilterFactory,
    FunctionDefinition,
    extract_functions,
    split_camel_case,
)
from anydiff.task import DiffTask


@pytest.fixture
def factory():
    """Fixture providing a filter factory that is closed afterwards."""
    with FilterFactory() as result:
        yield result


def run(factory, left="Lorem ipsum dolor", right="Lorem consectetur dolor", content_type=ContentType.TEXT):
    return DiffTask(left, right, "a", "b", content_type=content_type, entry_filter=entry_filter(factory.filters)).run()


class TestFunctionDefinitions:
    """Test finding rule functions in a script."""

    def test_split_camel_case(self):
        """Test splitting names into lower-cased words."""
        assert split_camel_case("skipLogLine") == ["skip", "log", "line"]
        assert split_camel_case("skipHTMLTags") == ["skip", "html", "tags"]

    def test_accept_and_skip(self):
        """Test classifying functions by their name."""
        assert FunctionDefinition("acceptDates", "line", "").is_accept
        assert FunctionDefinition("skipDates", "line", "").is_skip
        assert not FunctionDefinition("helper", "line", "").is_rule

    def test_skip_log_is_accept(self):
        """Test that a skip-and-log rule keeps the entry."""
        definition = FunctionDefinition("skipLogLine", "line", "")

        assert definition.is_accept
        assert not definition.is_skip

    def test_granularity(self):
        """Test that the parameter name selects the entries a rule sees."""
        assert FunctionDefinition("skipX", "Diff", "").granularity == DIFF_PARAMETER
        assert FunctionDefinition("skipX", "entry", "").granularity == EntryType.BLOCK
        assert FunctionDefinition("skipX", "line", "").granularity == EntryType.LINE
        assert FunctionDefinition("skipX", "fragments", "").granularity == EntryType.FRAGMENT_PAIR
        assert FunctionDefinition("skipX", "fragment", "").granularity == EntryType.FRAGMENT

    def test_extract_top_level(self):
        """Test that only top-level single-parameter functions are found."""
        source = """
            // function commented(x) { }
            function skipLine(line) {
                function inner(y) { return '}'; }
                return inner(line) === "function fake(z) {";
            }
            function acceptBoth(a, b) { return true; }
            function acceptBlock(block) { return false; }
        """
        functions = extract_functions(source)

        assert [f.name for f in functions] == ["skipLine", "acceptBlock"]
        assert functions[0].parameter == "line"
        assert functions[0].source.startswith("function skipLine(line) {")
        assert functions[0].source.endswith("}")


class TestFilterFactory:
    """Test loading and running scripts."""

    def test_use_script(self, factory):
        """Test that only accept and skip functions become rules."""
        rules = factory.use_script("function skipLine(line) { return true; }\nfunction helper(x) { return 1; }")

        assert len(rules) == 1
        assert factory.filters == rules

    def test_syntax_error(self, factory, caplog):
        """Test that a script with a syntax error yields no rules."""
        with caplog.at_level(logging.ERROR):
            rules = factory.use_script("function skipLine(line) { return ; ; }}")

        assert rules == []
        assert factory.filters == []
        assert "Error while parsing script" in caplog.text

    def test_skip_line(self, factory):
        """Test a line rule reading both sides."""
        factory.use_script("""
            function skipSynonyms(line) {
                return line.getLeft().includes('ipsum') && line.getRight().indexOf('consectetur') >= 0;
            }
        """)

        assert run(factory).children == []

    def test_rule_not_matching(self, factory):
        """Test that a rule answering false keeps the entry."""
        factory.use_script("function skipOther(line) { return line.getLeft() === 'other'; }")

        assert len(run(factory).children) == 1

    def test_accept_block(self, factory):
        """Test a block rule reading state and counts."""
        factory.use_script("""
            function acceptSingle(block) {
                return block.getState() === 'CHANGE' && block.getCount() === 1 && block.getName() === 'Block';
            }
        """)
        diff = run(factory)

        assert diff.count == 1
        assert diff.pending_count == 0

    def test_fragment_pair(self, factory):
        """Test a fragment pair rule reading both fragments."""
        factory.use_script("""
            function skipPair(fragments) {
                return fragments.getLeftFragment().toString() === 'ipsum'
                    && fragments.getRightFragment().isInsert();
            }
        """)

        assert run(factory).children == []

    def test_fragment_callback(self, factory, html_pair):
        """Test that fragment views resolve markup through Python."""
        factory.use_script("function skipClassChanges(fragment) { return fragment.isAttributeValue('class'); }")

        assert run(factory, *html_pair, content_type=ContentType.HTML).children == []

    def test_runtime_error(self, factory, caplog):
        """Test that a failing rule counts as false."""
        factory.use_script("function skipBroken(line) { throw new Error('nope'); }")

        with caplog.at_level(logging.ERROR):
            diff = run(factory)

        assert len(diff.children) == 1
        assert "Error while executing script" in caplog.text

    def test_console(self, factory, caplog):
        """Test that console output goes to the log."""
        factory.use_script("function skipLogged(line) { console.log('seen', line.getPath()); return false; }")

        with caplog.at_level(logging.INFO):
            run(factory)

        assert "seen" in caplog.text

    def test_closed(self):
        """Test that rules of a closed factory answer false."""
        factory = FilterFactory()
        factory.use_script("function skipLine(line) { return true; }")
        factory.close()

        assert len(run(factory).children) == 1
