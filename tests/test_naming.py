import unittest

import sharpcheck


def naming_issues(source, config=None):
    tree = sharpcheck.parse_source(source)
    return sharpcheck.NamingAnalyzer(config).collect(tree)


class IdentifierClassificationTests(unittest.TestCase):
    def test_split_identifier(self) -> None:
        self.assertEqual(sharpcheck.split_identifier("getData"), ["get", "Data"])
        self.assertEqual(sharpcheck.split_identifier("Order2Line"), ["Order2", "Line"])
        self.assertEqual(sharpcheck.split_identifier("user_id"), ["user", "_id"])
        self.assertEqual(sharpcheck.split_identifier("IO"), ["I", "O"])

    def test_pascal_case(self) -> None:
        self.assertTrue(sharpcheck.is_pascal_case("GetData"))
        self.assertTrue(sharpcheck.is_pascal_case("HTTPClient"))
        self.assertFalse(sharpcheck.is_pascal_case("getData"))
        self.assertFalse(sharpcheck.is_pascal_case("Get_data"))
        self.assertFalse(sharpcheck.is_pascal_case(""))

    def test_camel_case(self) -> None:
        self.assertTrue(sharpcheck.is_camel_case("userName"))
        self.assertTrue(sharpcheck.is_camel_case("value2"))
        self.assertFalse(sharpcheck.is_camel_case("UserName"))
        self.assertFalse(sharpcheck.is_camel_case("user_name"))

    def test_suggestions(self) -> None:
        self.assertEqual(sharpcheck.to_pascal_case("getData"), "GetData")
        self.assertEqual(sharpcheck.to_pascal_case("order_line"), "OrderLine")
        self.assertEqual(sharpcheck.to_camel_case("UserName"), "userName")
        self.assertEqual(sharpcheck.to_camel_case("user_name"), "userName")

    def test_scan_placeholders(self) -> None:
        self.assertEqual(sharpcheck.scan_placeholders('$"Hi {Name}, {Age:D2}"'), ["Name", "Age"])
        self.assertEqual(sharpcheck.scan_placeholders('"{{Name}} {Count,5} {Item.Id}"'), ["Count", "Item"])
        self.assertEqual(sharpcheck.scan_placeholders('"{0} { } {"'), [])


class NamingAnalyzerTests(unittest.TestCase):
    def test_method_not_pascal_case(self) -> None:
        issues = naming_issues("void getData(){ if (x) { } }")
        self.assertEqual(len(issues), 1)
        issue = issues[0]
        self.assertFalse(issue.passed)
        self.assertEqual(issue.category, "Naming")
        self.assertIn("GetData", issue.suggestion)
        self.assertEqual(issue.line, 1)
        self.assertEqual(issue.column, 6)

    def test_class_and_interface_names(self) -> None:
        issues = naming_issues("class order_line { } interface repository { }")
        suggestions = [issue.suggestion for issue in issues]
        self.assertEqual(len(issues), 2)
        self.assertIn("Rename to 'OrderLine'", suggestions)
        self.assertIn("Rename to 'Repository'", suggestions)

    def test_async_suffix(self) -> None:
        source = "class C { public async Task Load() { await Task.Delay(1); } }"
        issues = naming_issues(source)
        self.assertEqual([issue.rule_name for issue in issues], ["Async method missing Async suffix"])
        self.assertEqual(issues[0].suggestion, "Rename to 'LoadAsync'")

    def test_async_method_with_suffix_passes(self) -> None:
        source = "class C { public async Task LoadAsync() { await Task.Delay(1); } }"
        self.assertEqual(naming_issues(source), [])

    def test_parameter_rules(self) -> None:
        source = "class C { void Run(int _count, int MaxValue, int ok) { } }"
        issues = naming_issues(source)
        by_rule = {issue.rule_name: issue for issue in issues}
        self.assertEqual(len(issues), 2)
        self.assertEqual(by_rule["Parameter starts with underscore"].suggestion, "Rename to 'count'")
        self.assertEqual(by_rule["Parameter name not camelCase"].suggestion, "Rename to 'maxValue'")

    def test_constructor_parameters_are_checked(self) -> None:
        issues = naming_issues("class C { public C(int Size) { } }")
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].suggestion, "Rename to 'size'")

    def test_private_field_without_underscore(self) -> None:
        issues = naming_issues("class C { private int count; }")
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].rule_name, "Private field missing underscore")
        self.assertEqual(issues[0].suggestion, "Rename to '_count'")

    def test_hungarian_prefix(self) -> None:
        issues = naming_issues("class C { public int pCount; }")
        self.assertEqual([issue.rule_name for issue in issues], ["Forbidden 'p' prefix"])

    def test_underscore_field_must_be_camel_after_prefix(self) -> None:
        issues = naming_issues("class C { private int _Count; private int _total; }")
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].suggestion, "Rename to '_count'")

    def test_keywords_are_exempt(self) -> None:
        config = sharpcheck.AnalyzerConfig(keywords=frozenset({"legacy_api"}))
        self.assertEqual(naming_issues("class legacy_api { }", config), [])

    def test_string_placeholder_points_at_parameter(self) -> None:
        source = (
            "class C\n"
            "{\n"
            "    void Greet(string UserName)\n"
            "    {\n"
            '        Console.WriteLine($"Hello {UserName}");\n'
            '        Console.WriteLine($"Bye {UserName}");\n'
            "    }\n"
            "}\n"
        )
        issues = naming_issues(source)
        referenced = [i for i in issues if i.rule_name == "Parameter referenced in string not camelCase"]
        self.assertEqual(len(referenced), 1)
        self.assertEqual(referenced[0].line, 3)
        self.assertIn("userName", referenced[0].suggestion)

    def test_every_issue_has_location_and_suggestion(self) -> None:
        issues = naming_issues("class bad_name { private int pX; void do_it(int Y) { } }")
        self.assertTrue(issues)
        for issue in issues:
            self.assertGreater(issue.line, 0)
            self.assertTrue(issue.suggestion)


if __name__ == "__main__":
    unittest.main()
