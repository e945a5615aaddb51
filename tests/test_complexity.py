import unittest

import sharpcheck


def complexity_issues(source, config=None):
    tree = sharpcheck.parse_source(source)
    return sharpcheck.ComplexityAnalyzer(config).collect(tree)


BRANCHY = """\
class Router
{
    int Route(int code, bool a, bool b)
    {
        if (a && b) { code++; }
        for (int i = 0; i < 3; i++) { code++; }
        foreach (var item in items) { code++; }
        while (a || b) { break; }
        do { code--; } while (code > 0);
        switch (code)
        {
            case 1: return 1;
            case 2: return 2;
            default: return 0;
        }
        try { Run(); } catch (IOException) { } catch (TimeoutException) { }
        return a ? 1 : 2;
    }
}
"""


class ComplexityAnalyzerTests(unittest.TestCase):
    def test_straight_line_method_is_one(self) -> None:
        issues = complexity_issues("class C { int M() { int x = 1; return x; } }")
        self.assertEqual(len(issues), 1)
        self.assertIn("complexity = 1 (low)", issues[0].description)
        self.assertTrue(issues[0].passed)

    def test_top_level_example(self) -> None:
        issues = complexity_issues("void getData(){ if (x) { } }")
        self.assertEqual(len(issues), 1)
        self.assertIn("complexity = 2 (low)", issues[0].description)

    def test_every_decision_point_counts(self) -> None:
        # if, for, foreach, while, do (5) + 3 sections + 2 catches + 1 ternary + && and || (2)
        issues = complexity_issues(BRANCHY)
        self.assertEqual(len(issues), 1)
        self.assertIn("complexity = 14 (high)", issues[0].description)
        self.assertFalse(issues[0].passed)
        self.assertTrue(issues[0].suggestion)
        self.assertIn("**14**", issues[0].detail_message)

    def test_medium_level(self) -> None:
        body = " ".join("if (a) { a = !a; }" for _ in range(6))
        issues = complexity_issues(f"class C {{ void M(bool a) {{ {body} }} }}")
        self.assertIn("complexity = 7 (medium)", issues[0].description)
        self.assertTrue(issues[0].passed)

    def test_stacked_case_labels_form_one_section(self) -> None:
        source = "class C { int M(int c) { switch (c) { case 1: case 2: return 1; default: return 0; } } }"
        issues = complexity_issues(source)
        self.assertIn("complexity = 3 (low)", issues[0].description)

    def test_threshold_is_configurable(self) -> None:
        config = sharpcheck.AnalyzerConfig(max_complexity=2)
        issues = complexity_issues("class C { void M(bool a, bool b) { if (a && b) { } } }", config)
        self.assertIn("complexity = 3 (high)", issues[0].description)
        self.assertFalse(issues[0].passed)

    def test_methods_without_body_are_skipped(self) -> None:
        issues = complexity_issues("interface IWorker { void Work(); }")
        self.assertEqual(issues, [])

    def test_expression_bodied_method(self) -> None:
        issues = complexity_issues("class C { int Pick(bool a) => a ? 1 : 2; }")
        self.assertIn("complexity = 2", issues[0].description)

    def test_cyclomatic_complexity_function(self) -> None:
        tree = sharpcheck.parse_source(BRANCHY)
        method = next(tree.nodes_of_kind(sharpcheck.NodeKind.METHOD_DECL))
        self.assertEqual(sharpcheck.cyclomatic_complexity(method.body), 14)


if __name__ == "__main__":
    unittest.main()
