import unittest

import sharpcheck


def unused_issues(source):
    tree = sharpcheck.parse_source(source)
    return sharpcheck.UnusedCodeAnalyzer().collect(tree)


SERVICE = """\
class Service
{
    private int _used;
    private int _dead;

    public int Compute(int input, int ignored)
    {
        int result = input + _used;
        int scratch = 0;
        Helper();
        return result;
    }

    private void Helper() { }

    private void Orphan() { }

    public abstract void Declared(int value);
}
"""


class UnusedCodeAnalyzerTests(unittest.TestCase):
    def test_top_level_unused_local(self) -> None:
        issues = unused_issues("int temp = 1;")
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].rule_name, "Unused local variable")
        self.assertEqual((issues[0].line, issues[0].column), (1, 5))

    def test_referenced_local_is_not_flagged(self) -> None:
        self.assertEqual(unused_issues("int temp = 1;\nConsole.WriteLine(temp);"), [])

    def test_service_members(self) -> None:
        issues = unused_issues(SERVICE)
        flagged = sorted((issue.rule_name, issue.code_snippet) for issue in issues)
        self.assertEqual(
            flagged,
            [
                ("Unused local variable", "scratch"),
                ("Unused parameter", "ignored"),
                ("Unused private field", "_dead"),
                ("Unused private method", "Orphan"),
            ],
        )

    def test_locals_are_scoped_to_their_method(self) -> None:
        source = (
            "class C {\n"
            "    void A() { int count = 0; }\n"
            "    void B() { Console.WriteLine(count); }\n"
            "}\n"
        )
        issues = unused_issues(source)
        self.assertEqual([issue.code_snippet for issue in issues], ["count"])
        self.assertEqual(issues[0].line, 2)

    def test_accessor_local_is_scoped_to_accessor(self) -> None:
        source = (
            "class C {\n"
            "    int P { get { int temp = 1; return 0; } }\n"
            "    void M() { Console.WriteLine(temp); }\n"
            "}\n"
        )
        issues = unused_issues(source)
        self.assertEqual([(i.rule_name, i.code_snippet) for i in issues], [("Unused local variable", "temp")])
        self.assertEqual(issues[0].line, 2)

    def test_lambda_local_in_field_initializer(self) -> None:
        source = (
            "class C {\n"
            "    Func<int> make = () => { int temp = 1; return 0; };\n"
            "    void M() { Console.WriteLine(temp); }\n"
            "}\n"
        )
        issues = unused_issues(source)
        self.assertEqual([i.code_snippet for i in issues], ["temp"])

    def test_operator_local_is_scoped_to_operator(self) -> None:
        source = (
            "class Money {\n"
            "    public static Money operator +(Money a, Money b) { int temp = 0; return Use(a, b); }\n"
            "    void M() { Console.WriteLine(temp); }\n"
            "}\n"
        )
        issues = unused_issues(source)
        self.assertEqual([i.code_snippet for i in issues], ["temp"])

    def test_local_used_in_nested_block(self) -> None:
        source = "class C { void M(bool flag) { int temp = 1; if (flag) { Console.WriteLine(temp); } } }"
        self.assertEqual(unused_issues(source), [])

    def test_parameter_used_in_interpolation(self) -> None:
        source = 'class C { string Show(int value) { return $"v={value}"; } }'
        self.assertEqual(unused_issues(source), [])

    def test_constructor_parameter(self) -> None:
        issues = unused_issues("class C { public C(int size) { } }")
        self.assertEqual([issue.rule_name for issue in issues], ["Unused parameter"])

    def test_each_declarator_checked(self) -> None:
        issues = unused_issues("class C { void M() { int a = 1, b = 2; Use(a); } }")
        self.assertEqual([issue.code_snippet for issue in issues], ["b"])


if __name__ == "__main__":
    unittest.main()
