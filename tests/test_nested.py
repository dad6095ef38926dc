"""
Unit tests for path-addressed access to graphml trees.
"""

import copy
import unittest

from yedxtract.errors import (
    InvalidSegmentError,
    SingletonViolationError,
    TraversalError,
    TypeMismatchError,
)
from yedxtract.graphml.nested import (
    format_path,
    get_nested_field_map,
    get_nested_list,
    get_nested_property,
    get_nested_string,
    parse_path,
    resolve,
    set_nested_property,
    try_get_nested_string,
)
from yedxtract.models import SINGLETON


def make_tree():
    return {
        "y:ShapeNode": [{
            "y:Fill": [{"$": {"color": "#FFCC00", "transparent": "false"}}],
            "y:NodeLabel": [{"$": {"fontSize": "12"}, "_": "Start"}],
            "y:Shape": [{"$": {"type": "rectangle"}}],
            "y:Tags": ["alpha", "beta"],
        }],
    }


class TestParsePath(unittest.TestCase):
    """Test conversion of schema paths into segments."""

    def test_singleton_token_is_converted(self):
        self.assertEqual(parse_path(["y:Fill", "[0]", "$", 1]), ["y:Fill", SINGLETON, "$", 1])

    def test_invalid_segments_are_rejected(self):
        for path in (["a", 1.5], ["a", None], [True], "y:Fill"):
            with self.subTest(path=path):
                with self.assertRaises(InvalidSegmentError):
                    parse_path(path)

    def test_format_path(self):
        self.assertEqual(format_path(["y:Fill", SINGLETON, 2]), "y:Fill/[0]/2")


class TestGetNestedProperty(unittest.TestCase):
    """Test reading values at a path."""

    def setUp(self):
        self.tree = make_tree()

    def test_get_string_through_singletons(self):
        path = ["y:ShapeNode", "[0]", "y:NodeLabel", "[0]", "_"]
        self.assertEqual(get_nested_string(self.tree, path), "Start")

    def test_get_with_index(self):
        path = ["y:ShapeNode", 0, "y:Tags", 1]
        self.assertEqual(get_nested_property(self.tree, path), "beta")

    def test_empty_path_returns_tree(self):
        self.assertIs(get_nested_property(self.tree, []), self.tree)

    def test_missing_key_raises_traversal_error(self):
        with self.assertRaises(TraversalError):
            get_nested_property(self.tree, ["y:ShapeNode", "[0]", "y:Missing"])

    def test_index_out_of_range_raises_traversal_error(self):
        with self.assertRaises(TraversalError):
            get_nested_property(self.tree, ["y:ShapeNode", 0, "y:Tags", 2])
        with self.assertRaises(TraversalError):
            get_nested_property(self.tree, ["y:ShapeNode", -1])

    def test_string_before_end_of_path_raises_traversal_error(self):
        with self.assertRaises(TraversalError):
            get_nested_property(self.tree, ["y:ShapeNode", 0, "y:Tags", 0, "x"])

    def test_singleton_violation_for_any_other_length(self):
        for length in (0, 2, 5):
            with self.subTest(length=length):
                tree = {"items": [{"a": "b"}] * length}
                with self.assertRaises(SingletonViolationError):
                    get_nested_property(tree, ["items", "[0]"])

    def test_segment_value_mismatch_raises_invalid_segment_error(self):
        with self.assertRaises(InvalidSegmentError):
            get_nested_property(self.tree, ["y:ShapeNode", "y:Fill"])
        with self.assertRaises(InvalidSegmentError):
            get_nested_property(self.tree, [0])

    def test_typed_getters(self):
        self.assertEqual(get_nested_list(self.tree, ["y:ShapeNode", 0, "y:Tags"]), ["alpha", "beta"])
        fill = get_nested_field_map(self.tree, ["y:ShapeNode", 0, "y:Fill", 0])
        self.assertEqual(fill["$"]["color"], "#FFCC00")

        with self.assertRaises(TypeMismatchError):
            get_nested_string(self.tree, ["y:ShapeNode", 0, "y:Fill"])
        with self.assertRaises(TypeMismatchError):
            get_nested_list(self.tree, ["y:ShapeNode", 0, "y:Tags", 0])


class TestResolve(unittest.TestCase):
    """Test non-raising lookups."""

    def setUp(self):
        self.tree = make_tree()

    def test_found_value(self):
        result = resolve(self.tree, ["y:ShapeNode", "[0]", "y:Shape", "[0]", "$", "type"])
        self.assertTrue(result.ok)
        self.assertEqual(result.value, "rectangle")

    def test_missing_value_returns_error(self):
        result = try_get_nested_string(self.tree, ["y:ShapeNode", "[0]", "y:EdgeLabel"])
        self.assertFalse(result.ok)
        self.assertIsInstance(result.error, TraversalError)
        with self.assertRaises(TraversalError):
            result.unwrap()

    def test_type_mismatch_returns_error(self):
        result = try_get_nested_string(self.tree, ["y:ShapeNode"])
        self.assertIsInstance(result.error, TypeMismatchError)

    def test_invalid_segment_is_raised(self):
        with self.assertRaises(InvalidSegmentError):
            resolve(self.tree, ["y:ShapeNode", "[0]", 3])


class TestSetNestedProperty(unittest.TestCase):
    """Test writing values at a path."""

    def setUp(self):
        self.tree = make_tree()

    def test_set_then_get(self):
        paths = [
            ["y:ShapeNode", "[0]", "y:NodeLabel", "[0]", "_"],
            ["y:ShapeNode", "[0]", "y:Fill", "[0]", "$", "color"],
            ["y:ShapeNode", 0, "y:Tags", 1],
            ["y:ShapeNode", 0, "y:Shape", "[0]"],
        ]
        for path in paths:
            with self.subTest(path=path):
                set_nested_property(self.tree, path, "new")
                self.assertEqual(get_nested_property(self.tree, path), "new")

    def test_final_key_is_created(self):
        path = ["y:ShapeNode", "[0]", "y:Fill", "[0]", "$", "color2"]
        set_nested_property(self.tree, path, "#000000")
        self.assertEqual(get_nested_string(self.tree, path), "#000000")

    def test_final_index_equal_to_length_appends(self):
        set_nested_property(self.tree, ["y:ShapeNode", 0, "y:Tags", 2], "gamma")
        self.assertEqual(self.tree["y:ShapeNode"][0]["y:Tags"], ["alpha", "beta", "gamma"])

    def test_other_parts_are_untouched(self):
        original = copy.deepcopy(self.tree)
        set_nested_property(self.tree, ["y:ShapeNode", "[0]", "y:NodeLabel", "[0]", "_"], "Renamed")

        node, original_node = self.tree["y:ShapeNode"][0], original["y:ShapeNode"][0]
        for key in ("y:Fill", "y:Shape", "y:Tags"):
            self.assertEqual(node[key], original_node[key])
        self.assertEqual(node["y:NodeLabel"][0]["$"], original_node["y:NodeLabel"][0]["$"])

    def test_missing_intermediate_segment_raises(self):
        with self.assertRaises(TraversalError):
            set_nested_property(self.tree, ["y:ShapeNode", "[0]", "y:EdgeLabel", "[0]", "_"], "x")

    def test_singleton_violation_on_final_segment(self):
        with self.assertRaises(SingletonViolationError):
            set_nested_property(self.tree, ["y:ShapeNode", 0, "y:Tags", "[0]"], "x")

    def test_index_beyond_length_raises(self):
        with self.assertRaises(TraversalError):
            set_nested_property(self.tree, ["y:ShapeNode", 0, "y:Tags", 5], "x")

    def test_set_below_string_raises(self):
        with self.assertRaises(TypeMismatchError):
            set_nested_property(self.tree, ["y:ShapeNode", 0, "y:Tags", 0, "x"], "x")

    def test_empty_path_raises(self):
        with self.assertRaises(InvalidSegmentError):
            set_nested_property(self.tree, [], "x")

    def test_wrong_final_segment_type_raises(self):
        with self.assertRaises(InvalidSegmentError):
            set_nested_property(self.tree, ["y:ShapeNode", 0, 0], "x")
        with self.assertRaises(InvalidSegmentError):
            set_nested_property(self.tree, ["y:ShapeNode", "color"], "x")


if __name__ == '__main__':
    unittest.main()
