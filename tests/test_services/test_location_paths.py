import unittest

from location import paths


class LocationPathTests(unittest.TestCase):
    def test_build_path_root_is_own_id(self):
        self.assertEqual(paths.build_path(None, "a1"), "a1")
        self.assertEqual(paths.build_path("", "a1"), "a1")

    def test_build_path_appends_to_parent(self):
        self.assertEqual(paths.build_path("a1.b2", "c3"), "a1.b2.c3")

    def test_build_path_rejects_separator_in_id(self):
        with self.assertRaises(ValueError):
            paths.build_path("a1", "b.2")

    def test_split_path(self):
        self.assertEqual(paths.split_path("a1.b2.c3"), ["a1", "b2", "c3"])
        self.assertEqual(paths.split_path(""), [])

    def test_ancestor_ids_root_first(self):
        self.assertEqual(paths.ancestor_ids("a1.b2.c3"), ["a1", "b2"])
        self.assertEqual(paths.ancestor_ids("a1"), [])

    def test_depth(self):
        self.assertEqual(paths.depth("a1"), 1)
        self.assertEqual(paths.depth("a1.b2.c3"), 3)

    def test_descendant_prefix(self):
        self.assertEqual(paths.descendant_prefix("a1.b2"), "a1.b2.")

    def test_is_same_or_descendant(self):
        self.assertTrue(paths.is_same_or_descendant("a1.b2", "a1.b2"))
        self.assertTrue(paths.is_same_or_descendant("a1.b2.c3", "a1.b2"))
        self.assertFalse(paths.is_same_or_descendant("a1", "a1.b2"))

    def test_is_same_or_descendant_compares_whole_segments(self):
        # "a1.b22" shares a text prefix with "a1.b2" but is a sibling, not a child
        self.assertFalse(paths.is_same_or_descendant("a1.b22", "a1.b2"))
        self.assertFalse(paths.is_same_or_descendant("a1.b22.c3", "a1.b2"))

    def test_rebase_keeps_relative_tail(self):
        self.assertEqual(paths.rebase("a1.b2.c3.d4", "a1.b2", "x9.b2"), "x9.b2.c3.d4")
        self.assertEqual(paths.rebase("a1.b2", "a1.b2", "b2"), "b2")

    def test_rebase_outside_subtree_raises(self):
        with self.assertRaises(ValueError):
            paths.rebase("a1.b22.c3", "a1.b2", "x9.b2")


if __name__ == "__main__":
    unittest.main()
