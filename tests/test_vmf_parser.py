# Botpath imports
from botpath.conversion.vmf_parser import (
    MalformedSyntaxError,
    UnbalancedBracesError,
    VMFBranch,
    VMFLeaf,
    VMFSchemaError,
    load_vmf,
    parse_vmf,
)
from botpath.conversion.vmf_writer import (
    box_solid,
    detail_entity,
    format_vmf,
    new_branch,
    new_map,
)

# Third-party imports
import pytest


SIMPLE_VMF = """versioninfo
{
\t"editorversion" "400"
}
world
{
\t"id" "1"
\t"classname" "worldspawn"
\tsolid
\t{
\t\t"id" "2"
\t\tside
\t\t{
\t\t\t"id" "3"
\t\t}
\t\tside
\t\t{
\t\t\t"id" "4"
\t\t}
\t}
}
"""


@pytest.fixture
def simple_tree():
    return parse_vmf(SIMPLE_VMF)


class TestParsing:
    def test_leaf_values(self, simple_tree):
        world = simple_tree.get_one("world")
        assert world.get_one("classname").to_str() == "worldspawn"
        assert simple_tree.get_one("versioninfo").get_one("editorversion").to_str() == "400"

    def test_repeated_keys_keep_order(self, simple_tree):
        sides = simple_tree.get_one("world").get_one("solid").get_all("side")
        assert [s.get_one("id").to_str() for s in sides] == ["3", "4"]

    def test_missing_key_is_zero_occurrences(self, simple_tree):
        assert simple_tree.get_all("entity") == []

    def test_empty_text(self):
        assert parse_vmf("") == VMFBranch()

    def test_blank_lines_and_indentation_ignored(self):
        tree = parse_vmf('\n   world\n   {\n\n      "id" "1"   \n   }\n')
        assert tree.get_one("world").get_one("id").to_str() == "1"

    def test_unquoted_pair_is_not_a_leaf(self):
        # Anything that isn't exactly "key" "value" is read as a branch name
        with pytest.raises(MalformedSyntaxError):
            parse_vmf('world\n{\n"id"   "1"\n}\n')

    def test_value_with_spaces(self):
        tree = parse_vmf('world\n{\n"v" "1.5 -2 3"\n}\n')
        assert tree.get_one("world").get_one("v").to_vector() == (1.5, -2.0, 3.0)

    def test_deep_nesting(self):
        depth = 2000
        text = "a\n{\n" * depth + "}\n" * depth
        node = parse_vmf(text)
        for _ in range(depth):
            node = node.get_one("a")
        assert node == VMFBranch()


class TestParseErrors:
    def test_stray_closing_brace(self):
        with pytest.raises(UnbalancedBracesError) as exc_info:
            parse_vmf("}\n")
        assert exc_info.value.line_number == 1

    def test_unclosed_branch(self):
        with pytest.raises(UnbalancedBracesError):
            parse_vmf('world\n{\n"id" "1"\n')

    def test_branch_name_without_brace(self):
        with pytest.raises(MalformedSyntaxError) as exc_info:
            parse_vmf('world\n"id" "1"\n')
        assert exc_info.value.line_number == 2

    def test_branch_name_at_end_of_input(self):
        with pytest.raises(MalformedSyntaxError):
            parse_vmf("world")


class TestAccessors:
    def test_get_one_with_duplicates(self, simple_tree):
        solid = simple_tree.get_one("world").get_one("solid")
        with pytest.raises(VMFSchemaError):
            solid.get_one("side")

    def test_get_one_missing(self, simple_tree):
        with pytest.raises(VMFSchemaError):
            simple_tree.get_one("cameras")

    def test_leaf_lookup_fails(self):
        with pytest.raises(VMFSchemaError):
            VMFLeaf("1").get_one("id")
        with pytest.raises(VMFSchemaError):
            VMFLeaf("1").get_all("id")

    def test_branch_conversion_fails(self, simple_tree):
        with pytest.raises(VMFSchemaError):
            simple_tree.to_str()
        with pytest.raises(VMFSchemaError):
            simple_tree.to_vector()

    @pytest.mark.parametrize("value", ["1 2", "1 2 3 4", "a b c", ""])
    def test_bad_vectors(self, value):
        with pytest.raises(VMFSchemaError):
            VMFLeaf(value).to_vector()

    def test_get_value_default(self, simple_tree):
        world = simple_tree.get_one("world")
        assert world.get_value("id") == "1"
        assert world.get_value("mapversion", "0") == "0"
        # Branch under the key is not a string value
        assert world.get_value("solid") is None


class TestWriter:
    def test_round_trip(self, simple_tree):
        assert parse_vmf(format_vmf(simple_tree)) == simple_tree

    def test_built_map_round_trip(self):
        root = new_map(
            [box_solid(2, (0, 0, 0), (64, 64, 64))],
            [detail_entity(20, [box_solid(21, (0, 0, 64), (32, 32, 96.5), first_side_id=30)])],
        )
        text = format_vmf(root)
        assert parse_vmf(text) == root
        assert '"classname" "func_detail"' in text
        assert "96.5" in text

    def test_new_branch_stringifies(self):
        branch = new_branch(id=7, classname="info_target")
        assert branch.get_value("id") == "7"

    def test_load_vmf(self, tmp_path):
        path = tmp_path / "simple.vmf"
        path.write_text(SIMPLE_VMF)
        assert load_vmf(path) == parse_vmf(SIMPLE_VMF)
