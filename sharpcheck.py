#!/usr/bin/env python3
"""
SharpCheck - Rule-based static analysis for C#

High-level goals:
- Parse C# (via tree-sitter) into a small tagged-variant syntax model
- Run independent analyzers (naming, complexity, documentation,
  duplication, dead code, size, exception handling) over one unit
- Merge their findings into one deterministic AnalysisResult
- Emit stable structured JSON for web views, CI or IDEs

The engine never mutates or reformats source; it only flags and suggests.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
)
import functools
import hashlib
import json
import re
import sys
import threading

import tree_sitter_c_sharp
import yaml
from tree_sitter import Language, Node, Parser


# ============================================================
# ========================== ERRORS ==========================
# ============================================================

class SharpCheckError(Exception):
    """Base class for every error raised by this module."""


class ParseError(SharpCheckError):
    """The source text could not be turned into a syntax tree."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class ConfigurationError(SharpCheckError):
    """Invalid analyzer configuration (thresholds, keyword table, YAML)."""


class ResultSealedError(SharpCheckError):
    """Raised when a returned AnalysisResult is mutated."""


def _report(message: str) -> None:
    sys.stderr.write(f"[sharpcheck] {message}\n")


# ============================================================
# ======================= SYNTAX MODEL =======================
# ============================================================

class NodeKind(Enum):
    UNIT = "Unit"
    CLASS_DECL = "ClassDecl"
    INTERFACE_DECL = "InterfaceDecl"
    METHOD_DECL = "MethodDecl"
    CONSTRUCTOR_DECL = "ConstructorDecl"
    FIELD_DECL = "FieldDecl"
    PROPERTY_DECL = "PropertyDecl"
    BLOCK = "Block"
    EXPRESSION_BODY = "ExpressionBody"
    IF_STMT = "IfStmt"
    FOR_STMT = "ForStmt"
    FOREACH_STMT = "ForEachStmt"
    WHILE_STMT = "WhileStmt"
    DO_STMT = "DoStmt"
    SWITCH_STMT = "SwitchStmt"
    LOCAL_DECL = "LocalDecl"
    THROW_STMT = "ThrowStmt"
    CATCH_CLAUSE = "CatchClause"
    CONDITIONAL_EXPR = "ConditionalExpr"
    BINARY_EXPR = "BinaryExpr"
    INVOCATION_EXPR = "InvocationExpr"
    MEMBER_ACCESS = "MemberAccess"
    IDENTIFIER_REF = "IdentifierRef"
    STRING_LITERAL = "StringLiteral"
    INTERPOLATED_STRING = "InterpolatedString"
    TOKEN = "Token"
    OTHER = "Other"


# tree-sitter-c-sharp node type -> NodeKind. Older grammar releases spell a
# few statements differently, both spellings are listed.
TS_KIND_MAP: Dict[str, NodeKind] = {
    "compilation_unit": NodeKind.UNIT,
    "class_declaration": NodeKind.CLASS_DECL,
    "struct_declaration": NodeKind.CLASS_DECL,
    "record_declaration": NodeKind.CLASS_DECL,
    "record_struct_declaration": NodeKind.CLASS_DECL,
    "interface_declaration": NodeKind.INTERFACE_DECL,
    "method_declaration": NodeKind.METHOD_DECL,
    "local_function_statement": NodeKind.METHOD_DECL,
    "constructor_declaration": NodeKind.CONSTRUCTOR_DECL,
    "field_declaration": NodeKind.FIELD_DECL,
    "property_declaration": NodeKind.PROPERTY_DECL,
    "block": NodeKind.BLOCK,
    "arrow_expression_clause": NodeKind.EXPRESSION_BODY,
    "if_statement": NodeKind.IF_STMT,
    "for_statement": NodeKind.FOR_STMT,
    "foreach_statement": NodeKind.FOREACH_STMT,
    "for_each_statement": NodeKind.FOREACH_STMT,
    "while_statement": NodeKind.WHILE_STMT,
    "do_statement": NodeKind.DO_STMT,
    "switch_statement": NodeKind.SWITCH_STMT,
    "local_declaration_statement": NodeKind.LOCAL_DECL,
    "throw_statement": NodeKind.THROW_STMT,
    "throw_expression": NodeKind.THROW_STMT,
    "catch_clause": NodeKind.CATCH_CLAUSE,
    "conditional_expression": NodeKind.CONDITIONAL_EXPR,
    "binary_expression": NodeKind.BINARY_EXPR,
    "invocation_expression": NodeKind.INVOCATION_EXPR,
    "member_access_expression": NodeKind.MEMBER_ACCESS,
    "identifier": NodeKind.IDENTIFIER_REF,
    "string_literal": NodeKind.STRING_LITERAL,
    "verbatim_string_literal": NodeKind.STRING_LITERAL,
    "raw_string_literal": NodeKind.STRING_LITERAL,
    "interpolated_string_expression": NodeKind.INTERPOLATED_STRING,
}

DECLARATION_KINDS = frozenset(
    {
        NodeKind.CLASS_DECL,
        NodeKind.INTERFACE_DECL,
        NodeKind.METHOD_DECL,
        NodeKind.CONSTRUCTOR_DECL,
        NodeKind.FIELD_DECL,
        NodeKind.PROPERTY_DECL,
    }
)

# Members whose body is a scope for locals and parameters.
MEMBER_SCOPE_KINDS = frozenset({NodeKind.METHOD_DECL, NodeKind.CONSTRUCTOR_DECL})


@dataclass(frozen=True)
class Span:
    start_line: int
    start_col: int
    end_line: int
    end_col: int


@dataclass(frozen=True)
class Token:
    text: str
    span: Span


@dataclass(eq=False)
class SyntaxNode:
    """
    One node of the analysed unit. Read-only for analyzers.

    Only the attributes meaningful for the node's kind are populated:
    - declarations: modifiers, identifier, parameters, doc_comment
    - FieldDecl / LocalDecl: declarators (one token per declared name)
    - BinaryExpr: operator
    - SwitchStmt: sections
    - CatchClause: type_name, identifier (declared exception variable)
    - ThrowStmt: identifier when the thrown expression is a bare name
    - InvocationExpr: callee (full text), callee_name (rightmost simple name)
    - MemberAccess: member_name
    """
    kind: NodeKind
    span: Span
    start_byte: int
    end_byte: int
    source: bytes = field(repr=False)

    modifiers: FrozenSet[str] = frozenset()
    identifier: Optional[Token] = None
    parameters: List[Token] = field(default_factory=list)
    declarators: List[Token] = field(default_factory=list)
    doc_comment: Optional[Token] = None

    operator: Optional[str] = None
    sections: int = 0
    type_name: Optional[str] = None
    callee: Optional[str] = None
    callee_name: Optional[str] = None
    member_name: Optional[str] = None

    children: List["SyntaxNode"] = field(default_factory=list, repr=False)
    parent: Optional["SyntaxNode"] = field(default=None, repr=False)

    @property
    def text(self) -> str:
        return self.source[self.start_byte:self.end_byte].decode("utf-8", errors="replace")

    @property
    def name(self) -> Optional[str]:
        return self.identifier.text if self.identifier else None

    @property
    def body(self) -> Optional["SyntaxNode"]:
        """Block or expression body of a member, None for abstract/extern declarations."""
        for child in self.children:
            if child.kind in (NodeKind.BLOCK, NodeKind.EXPRESSION_BODY):
                return child
        return None

    @property
    def statements(self) -> List["SyntaxNode"]:
        """Statements of a Block (braces and comments excluded)."""
        return [child for child in self.children if child.kind is not NodeKind.TOKEN]

    def has_modifier(self, modifier: str) -> bool:
        return modifier in self.modifiers

    def walk(self) -> Iterator["SyntaxNode"]:
        yield self
        yield from self.descendants()

    def descendants(self) -> Iterator["SyntaxNode"]:
        """Pre-order descendants, excluding self. Each call starts a fresh walk."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def descendants_of_kind(self, *kinds: NodeKind) -> Iterator["SyntaxNode"]:
        wanted = frozenset(kinds)
        return (node for node in self.descendants() if node.kind in wanted)

    def ancestors(self) -> Iterator["SyntaxNode"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def enclosing(self, kinds: Iterable[NodeKind]) -> Optional["SyntaxNode"]:
        wanted = frozenset(kinds)
        for ancestor in self.ancestors():
            if ancestor.kind in wanted:
                return ancestor
        return None

    def canonical_text(self) -> str:
        """
        Formatting-independent serialization of this subtree: every leaf
        token in source order joined by a single space. Comments are never
        part of the tree, so they never reach the canonical form.
        """
        return " ".join(node.text for node in self.walk() if not node.children)


@dataclass
class SyntaxTree:
    root: SyntaxNode
    source_text: str

    def descendant_nodes(self) -> Iterator[SyntaxNode]:
        return self.root.descendants()

    def nodes_of_kind(self, *kinds: NodeKind) -> Iterator[SyntaxNode]:
        return self.root.descendants_of_kind(*kinds)


# ============================================================
# ==================== TREE-SITTER FRONTEND ==================
# ============================================================

@functools.lru_cache(maxsize=None)
def _csharp_language() -> Language:
    return Language(tree_sitter_c_sharp.language())


def parse_source(source_text: str) -> SyntaxTree:
    """
    Parse C# source text and convert it into the SyntaxNode model.
    Raises ParseError when tree-sitter reports an error or missing node, or
    when the text cannot be encoded (lone surrogates).
    """
    try:
        source = source_text.encode("utf-8")
    except UnicodeEncodeError as exc:
        line = source_text.count("\n", 0, exc.start) + 1
        column = exc.start - (source_text.rfind("\n", 0, exc.start) + 1) + 1
        raise ParseError(
            f"Invalid character at line {line}, column {column}: {exc.reason}.", line, column
        ) from exc
    # Parsers are not shareable across threads; one per call is cheap.
    parser = Parser(_csharp_language())
    ts_tree = parser.parse(source)
    ts_root = ts_tree.root_node

    if ts_root.has_error:
        raise _parse_error_from(ts_root)

    return SyntaxTree(root=_convert_tree(ts_root, source), source_text=source_text)


def _parse_error_from(ts_root: Node) -> ParseError:
    stack = [ts_root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            line, column = node.start_point[0] + 1, node.start_point[1] + 1
            if node.is_missing:
                message = f"Syntax error: missing '{node.type}' at line {line}, column {column}."
            else:
                snippet = _ts_text(node).strip().splitlines()
                near = f" near '{snippet[0][:40]}'" if snippet else ""
                message = f"Syntax error at line {line}, column {column}{near}."
            return ParseError(message, line, column)
        if node.has_error:
            stack.extend(reversed(node.children))
    return ParseError("Syntax error: the source could not be parsed.")


def _ts_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8", errors="replace")


def _ts_span(node: Node) -> Span:
    return Span(
        start_line=node.start_point[0] + 1,
        start_col=node.start_point[1] + 1,
        end_line=node.end_point[0] + 1,
        end_col=node.end_point[1] + 1,
    )


def _ts_token(node: Optional[Node]) -> Optional[Token]:
    if node is None:
        return None
    return Token(text=_ts_text(node).lstrip("@"), span=_ts_span(node))


def _convert_tree(ts_root: Node, source: bytes) -> SyntaxNode:
    root = _convert_node(ts_root, source)
    stack: List[Tuple[Node, SyntaxNode]] = [(ts_root, root)]
    while stack:
        ts_node, model = stack.pop()
        for ts_child in ts_node.children:
            if ts_child.type == "comment":
                continue
            child = _convert_node(ts_child, source)
            child.parent = model
            model.children.append(child)
            stack.append((ts_child, child))
    return root


def _convert_node(ts_node: Node, source: bytes) -> SyntaxNode:
    if ts_node.is_named:
        kind = TS_KIND_MAP.get(ts_node.type, NodeKind.OTHER)
    else:
        kind = NodeKind.TOKEN

    node = SyntaxNode(
        kind=kind,
        span=_ts_span(ts_node),
        start_byte=ts_node.start_byte,
        end_byte=ts_node.end_byte,
        source=source,
    )

    populate = _POPULATORS.get(kind)
    if populate is not None:
        populate(node, ts_node)
    return node


def _named_children(ts_node: Node) -> List[Node]:
    return [child for child in ts_node.named_children if child.type != "comment"]


def _first_child_of_type(ts_node: Node, *types: str) -> Optional[Node]:
    for child in ts_node.named_children:
        if child.type in types:
            return child
    return None


def _modifiers_of(ts_node: Node) -> FrozenSet[str]:
    return frozenset(
        _ts_text(child).strip() for child in ts_node.named_children if child.type == "modifier"
    )


def _name_of(ts_node: Node) -> Optional[Node]:
    name = ts_node.child_by_field_name("name")
    if name is not None:
        return name
    return _first_child_of_type(ts_node, "identifier")


def _leading_doc_comment(ts_node: Node) -> Optional[Token]:
    """
    Collect the `///` or `/** */` comments directly preceding a declaration.
    Stops at the first sibling that is not a comment.
    """
    docs: List[Node] = []
    sibling = ts_node.prev_sibling
    while sibling is not None and sibling.type == "comment":
        text = _ts_text(sibling)
        if text.startswith("///") or (text.startswith("/**") and text != "/**/"):
            docs.append(sibling)
        sibling = sibling.prev_sibling
    if not docs:
        return None
    docs.reverse()
    span = Span(
        start_line=docs[0].start_point[0] + 1,
        start_col=docs[0].start_point[1] + 1,
        end_line=docs[-1].end_point[0] + 1,
        end_col=docs[-1].end_point[1] + 1,
    )
    return Token(text="\n".join(_ts_text(doc) for doc in docs), span=span)


def _declarators_of(ts_node: Node) -> List[Token]:
    declaration = _first_child_of_type(ts_node, "variable_declaration")
    if declaration is None:
        return []
    tokens: List[Token] = []
    for declarator in declaration.named_children:
        if declarator.type != "variable_declarator":
            continue
        token = _ts_token(_name_of(declarator))
        if token is not None:
            tokens.append(token)
    return tokens


def _populate_declaration(node: SyntaxNode, ts_node: Node) -> None:
    node.modifiers = _modifiers_of(ts_node)
    node.doc_comment = _leading_doc_comment(ts_node)
    if node.kind is NodeKind.FIELD_DECL:
        node.declarators = _declarators_of(ts_node)
        node.identifier = node.declarators[0] if node.declarators else None
        return
    node.identifier = _ts_token(_name_of(ts_node))
    if node.kind in MEMBER_SCOPE_KINDS:
        parameter_list = ts_node.child_by_field_name("parameters") or _first_child_of_type(
            ts_node, "parameter_list"
        )
        if parameter_list is not None:
            for parameter in parameter_list.named_children:
                if parameter.type != "parameter":
                    continue
                token = _ts_token(_parameter_name(parameter))
                if token is not None:
                    node.parameters.append(token)


def _parameter_name(ts_parameter: Node) -> Optional[Node]:
    name = ts_parameter.child_by_field_name("name")
    if name is not None:
        return name
    identifiers = [child for child in ts_parameter.named_children if child.type == "identifier"]
    return identifiers[-1] if identifiers else None


def _populate_local(node: SyntaxNode, ts_node: Node) -> None:
    node.modifiers = _modifiers_of(ts_node)
    node.declarators = _declarators_of(ts_node)
    node.identifier = node.declarators[0] if node.declarators else None


def _populate_switch(node: SyntaxNode, ts_node: Node) -> None:
    switch_body = ts_node.child_by_field_name("body") or _first_child_of_type(ts_node, "switch_body")
    if switch_body is None:
        return
    # Stacked labels (`case 1: case 2:`) come out as label-only sections that
    # belong to the next section holding statements.
    node.sections = sum(
        1
        for section in switch_body.named_children
        if section.type == "switch_section" and any(_is_statement(child) for child in section.named_children)
    )


def _is_statement(ts_node: Node) -> bool:
    return ts_node.type == "block" or ts_node.type.endswith("_statement")


def _populate_catch(node: SyntaxNode, ts_node: Node) -> None:
    declaration = _first_child_of_type(ts_node, "catch_declaration")
    if declaration is None:
        return
    type_node = declaration.child_by_field_name("type")
    name_node = declaration.child_by_field_name("name")
    if type_node is None:
        named = _named_children(declaration)
        type_node = named[0] if named else None
        if name_node is None and len(named) > 1 and named[1].type == "identifier":
            name_node = named[1]
    node.type_name = _ts_text(type_node).strip() if type_node is not None else None
    node.identifier = _ts_token(name_node)


def _populate_throw(node: SyntaxNode, ts_node: Node) -> None:
    named = _named_children(ts_node)
    if len(named) == 1 and named[0].type == "identifier":
        node.identifier = _ts_token(named[0])


def _populate_binary(node: SyntaxNode, ts_node: Node) -> None:
    operator = ts_node.child_by_field_name("operator")
    if operator is None:
        anonymous = [child for child in ts_node.children if not child.is_named]
        operator = anonymous[0] if anonymous else None
    node.operator = _ts_text(operator).strip() if operator is not None else None


def _populate_invocation(node: SyntaxNode, ts_node: Node) -> None:
    function = ts_node.child_by_field_name("function")
    if function is None:
        named = _named_children(ts_node)
        function = named[0] if named else None
    if function is None:
        return
    node.callee = _ts_text(function).strip()
    node.callee_name = _simple_name(function)


def _simple_name(ts_node: Node) -> Optional[str]:
    if ts_node.type == "identifier":
        return _ts_text(ts_node).lstrip("@")
    if ts_node.type == "member_access_expression":
        name = ts_node.child_by_field_name("name")
        if name is None:
            named = _named_children(ts_node)
            name = named[-1] if named else None
        return _simple_name(name) if name is not None else None
    if ts_node.type == "generic_name":
        identifier = _first_child_of_type(ts_node, "identifier")
        return _ts_text(identifier).lstrip("@") if identifier is not None else None
    return None


def _populate_member_access(node: SyntaxNode, ts_node: Node) -> None:
    name = ts_node.child_by_field_name("name")
    if name is None:
        named = _named_children(ts_node)
        name = named[-1] if named else None
    if name is not None:
        node.member_name = _simple_name(name) or _ts_text(name)


_POPULATORS: Dict[NodeKind, Callable[[SyntaxNode, Node], None]] = {
    NodeKind.CLASS_DECL: _populate_declaration,
    NodeKind.INTERFACE_DECL: _populate_declaration,
    NodeKind.METHOD_DECL: _populate_declaration,
    NodeKind.CONSTRUCTOR_DECL: _populate_declaration,
    NodeKind.FIELD_DECL: _populate_declaration,
    NodeKind.PROPERTY_DECL: _populate_declaration,
    NodeKind.LOCAL_DECL: _populate_local,
    NodeKind.SWITCH_STMT: _populate_switch,
    NodeKind.CATCH_CLAUSE: _populate_catch,
    NodeKind.THROW_STMT: _populate_throw,
    NodeKind.BINARY_EXPR: _populate_binary,
    NodeKind.INVOCATION_EXPR: _populate_invocation,
    NodeKind.MEMBER_ACCESS: _populate_member_access,
}


# ============================================================
# ======================= RESULT MODEL =======================
# ============================================================

ERROR_CATEGORY = "Error"


@dataclass(frozen=True)
class Issue:
    """
    One finding. Locations are 1-based; 0 means "not applicable"
    (aggregate issues such as the documentation score).
    """
    rule_name: str
    description: str
    passed: bool
    suggestion: str = ""
    code_snippet: str = ""
    line: int = 0
    column: int = 0
    category: str = ""
    detail_message: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.passed and not self.suggestion:
            raise ValueError(f"Failing issue '{self.rule_name}' must carry a suggestion")


@dataclass
class CategoryResult:
    name: str
    issues: Sequence[Issue] = field(default_factory=list)
    _sealed: bool = field(default=False, repr=False, compare=False)

    def add(self, issue: Issue) -> None:
        if self._sealed:
            raise ResultSealedError(f"Category '{self.name}' is read-only")
        self.issues.append(issue)  # type: ignore[attr-defined]

    def extend(self, issues: Iterable[Issue]) -> None:
        for issue in issues:
            self.add(issue)

    def seal(self) -> None:
        self.issues = tuple(self.issues)
        self._sealed = True


class AnalysisResult:
    """
    Ordered, name-unique collection of CategoryResults for one unit.
    Built fresh per analyze() call and sealed before it is handed back.
    """

    def __init__(self, file_name: str = "Unknown") -> None:
        self.file_name = file_name
        self._categories: Dict[str, CategoryResult] = {}
        self._sealed = False

    @property
    def categories(self) -> List[CategoryResult]:
        return list(self._categories.values())

    @property
    def total_issues(self) -> int:
        return sum(
            1 for category in self._categories.values() for issue in category.issues if not issue.passed
        )

    @property
    def sealed(self) -> bool:
        return self._sealed

    def find_category(self, name: str) -> Optional[CategoryResult]:
        return self._categories.get(name)

    def category(self, name: str) -> CategoryResult:
        """Find-or-create the category called `name`."""
        existing = self._categories.get(name)
        if existing is not None:
            return existing
        if self._sealed:
            raise ResultSealedError(f"Cannot add category '{name}' to a returned result")
        created = CategoryResult(name=name)
        self._categories[name] = created
        return created

    def seal(self) -> "AnalysisResult":
        for category in self._categories.values():
            category.seal()
        self._sealed = True
        return self

    def __repr__(self) -> str:
        return (
            f"AnalysisResult(file_name={self.file_name!r}, "
            f"categories={[c.name for c in self.categories]!r}, total_issues={self.total_issues})"
        )


# ============================================================
# ====================== CONFIGURATION =======================
# ============================================================

# Keywords and well-known framework type names. They cannot be renamed, so
# they are exempt from case-style rules. Compared case-insensitively.
DEFAULT_KEYWORDS: FrozenSet[str] = frozenset(
    word.lower()
    for word in (
        "using", "class", "struct", "interface", "enum", "delegate", "event",
        "public", "private", "protected", "internal", "extern", "static",
        "virtual", "override", "abstract", "sealed", "async", "await",
        "void", "bool", "int", "string", "double", "float", "char", "long",
        "short", "byte", "decimal", "object", "var", "new", "this", "base",
        "if", "else", "for", "while", "do", "switch", "case", "default",
        "try", "catch", "finally", "throw", "return", "continue", "break",
        "lock", "fixed", "unsafe", "checked", "unchecked", "nameof", "typeof", "sizeof",
        "true", "false", "null",
        "Console", "Math", "File", "Directory", "DateTime", "List", "Task",
    )
)


@dataclass(frozen=True)
class AnalyzerConfig:
    max_complexity: int = 10
    max_method_lines: int = 50
    max_parameters: int = 5
    keywords: FrozenSet[str] = DEFAULT_KEYWORDS

    def __post_init__(self) -> None:
        if _is_keyword_collection(self.keywords):
            object.__setattr__(self, "keywords", frozenset(word.lower() for word in self.keywords))

    def validate(self) -> None:
        for name in ("max_complexity", "max_method_lines", "max_parameters"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
        if not _is_keyword_collection(self.keywords):
            raise ConfigurationError("keywords must be a collection of strings")

    def is_keyword(self, name: str) -> bool:
        return name.lower() in self.keywords


def _is_keyword_collection(value: Any) -> bool:
    return isinstance(value, (set, frozenset, list, tuple)) and all(
        isinstance(word, str) for word in value
    )


CONFIG_KEYS = {"max_complexity", "max_method_lines", "max_parameters", "keywords", "extra_keywords"}


def load_config_from_yaml(path: str) -> AnalyzerConfig:
    """
    Load an AnalyzerConfig from a YAML mapping, e.g.

        max_complexity: 12
        max_method_lines: 80
        max_parameters: 4
        extra_keywords: [Guid, Logger]

    `keywords` replaces the built-in table, `extra_keywords` extends it.
    A missing file is reported and yields defaults; bad content raises
    ConfigurationError.
    """
    try:
        with open(path, "r", encoding="utf-8") as handle:
            document = yaml.safe_load(handle)
    except FileNotFoundError:
        _report(f"Config file not found: {path}; using defaults.")
        return AnalyzerConfig()
    except OSError as exc:
        raise ConfigurationError(f"Could not read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    return config_from_mapping(document, origin=path)


def config_from_mapping(document: Any, origin: str = "<mapping>") -> AnalyzerConfig:
    if document is None:
        return AnalyzerConfig()
    if not isinstance(document, dict):
        raise ConfigurationError(f"{origin}: expected a mapping at the top level")

    for key in sorted(set(document) - CONFIG_KEYS):
        _report(f"{origin}: ignoring unknown config key '{key}'.")

    overrides: Dict[str, Any] = {}
    for key in ("max_complexity", "max_method_lines", "max_parameters"):
        if key in document:
            overrides[key] = document[key]

    keywords = DEFAULT_KEYWORDS
    if "keywords" in document:
        keywords = _keyword_table(document["keywords"], origin, "keywords")
    if "extra_keywords" in document:
        keywords = keywords | _keyword_table(document["extra_keywords"], origin, "extra_keywords")
    overrides["keywords"] = keywords

    config = replace(AnalyzerConfig(), **overrides)
    config.validate()
    return config


def _keyword_table(value: Any, origin: str, key: str) -> FrozenSet[str]:
    if not isinstance(value, list) or not all(isinstance(word, str) for word in value):
        raise ConfigurationError(f"{origin}: '{key}' must be a list of strings")
    return frozenset(word.lower() for word in value)


# ============================================================
# ===================== ANALYZER BASE ========================
# ============================================================

class Analyzer:
    """
    An analyzer owns exactly one category. `collect` derives issues from
    the read-only tree; `analyze` find-or-creates the category once and
    appends to it. Analyzers never touch another analyzer's category.
    """
    name = "Analyzer"
    category = ""

    def __init__(self, config: Optional[AnalyzerConfig] = None) -> None:
        self.config = config or AnalyzerConfig()

    def collect(self, tree: SyntaxTree) -> List[Issue]:
        raise NotImplementedError

    def analyze(self, result: AnalysisResult, tree: SyntaxTree) -> None:
        issues = self.collect(tree)
        result.category(self.category).extend(issues)

    def _issue(
        self,
        rule_name: str,
        description: str,
        suggestion: str,
        *,
        at: Optional[Span] = None,
        snippet: str = "",
        passed: bool = False,
        detail: Optional[str] = None,
    ) -> Issue:
        line = at.start_line if at else 0
        column = at.start_col if at else 0
        if detail is None:
            detail = f"**{rule_name}**\n{description}\nSuggestion: {suggestion}"
            if at is not None:
                detail += f"\nLine {line}, column {column}"
        return Issue(
            rule_name=rule_name,
            description=description,
            passed=passed,
            suggestion=suggestion,
            code_snippet=snippet,
            line=line,
            column=column,
            category=self.category,
            detail_message=detail,
        )


# ============================================================
# ==================== NAMING CONVENTIONS ====================
# ============================================================

def split_identifier(name: str) -> List[str]:
    """
    Split an identifier into word segments, left to right: an uppercase
    letter or a non-alphanumeric character (`_`) starts a new segment,
    lowercase letters and digits extend the current one.

        split_identifier("getHTTPData") == ["get", "H", "T", "T", "P", "Data"]
        split_identifier("user_id2") == ["user", "_id2"]
    """
    segments: List[str] = []
    current = ""
    for char in name:
        starts_segment = char.isupper() or not (char.isalnum())
        if starts_segment and current:
            segments.append(current)
            current = ""
        current += char
    if current:
        segments.append(current)
    return segments


def is_pascal_case(name: str) -> bool:
    if not name or not name[0].isupper():
        return False
    return all(segment[0].isupper() for segment in split_identifier(name))


def is_camel_case(name: str) -> bool:
    if not name or not name[0].islower():
        return False
    return all(segment[0].isupper() for segment in split_identifier(name)[1:])


def _words(name: str) -> List[str]:
    words = []
    for segment in split_identifier(name):
        word = "".join(char for char in segment if char.isalnum())
        if word:
            words.append(word)
    return words


def to_pascal_case(name: str) -> str:
    return "".join(word[0].upper() + word[1:].lower() for word in _words(name)) or name


def to_camel_case(name: str) -> str:
    pascal = to_pascal_case(name)
    if not pascal:
        return pascal
    words = _words(name)
    if not words:
        return name
    first = words[0].lower()
    return first + pascal[len(words[0]):]


_IDENTIFIER_START = re.compile(r"[A-Za-z_]")
_IDENTIFIER_CHAR = re.compile(r"[A-Za-z0-9_]")


def scan_placeholders(text: str) -> List[str]:
    """
    Tiny lexer over string-literal text returning the leading identifier of
    every `{identifier}` placeholder. `{{` escapes are skipped; a placeholder
    may continue with a format (`:`), alignment (`,`) or member access (`.`).
    """
    found: List[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "{":
            index += 1
            continue
        if index + 1 < length and text[index + 1] == "{":
            index += 2
            continue
        cursor = index + 1
        while cursor < length and text[cursor].isspace():
            cursor += 1
        start = cursor
        if cursor < length and _IDENTIFIER_START.match(text[cursor]):
            cursor += 1
            while cursor < length and _IDENTIFIER_CHAR.match(text[cursor]):
                cursor += 1
            identifier = text[start:cursor]
            while cursor < length and text[cursor].isspace():
                cursor += 1
            if cursor < length and text[cursor] in "}:,.":
                found.append(identifier)
        index = max(cursor, index + 1)
    return found


class NamingAnalyzer(Analyzer):
    name = "NamingAnalyzer"
    category = "Naming"

    def collect(self, tree: SyntaxTree) -> List[Issue]:
        issues: List[Issue] = []
        for node in tree.descendant_nodes():
            if node.kind in (NodeKind.CLASS_DECL, NodeKind.INTERFACE_DECL):
                self._check_type(node, issues)
            elif node.kind is NodeKind.METHOD_DECL:
                self._check_method(node, issues)
                self._check_parameters(node, issues)
                self._check_string_references(node, issues)
            elif node.kind is NodeKind.CONSTRUCTOR_DECL:
                self._check_parameters(node, issues)
            elif node.kind is NodeKind.FIELD_DECL:
                self._check_fields(node, issues)
        return issues

    def _check_type(self, node: SyntaxNode, issues: List[Issue]) -> None:
        token = node.identifier
        if token is None or self.config.is_keyword(token.text) or is_pascal_case(token.text):
            return
        label = "Class" if node.kind is NodeKind.CLASS_DECL else "Interface"
        suggestion = to_pascal_case(token.text)
        issues.append(
            self._issue(
                f"{label} name not PascalCase",
                f"{label} '{token.text}' must use PascalCase.",
                f"Rename to '{suggestion}'",
                at=token.span,
                snippet=token.text,
            )
        )

    def _check_method(self, node: SyntaxNode, issues: List[Issue]) -> None:
        token = node.identifier
        if token is None or self.config.is_keyword(token.text):
            return
        if not is_pascal_case(token.text):
            suggestion = to_pascal_case(token.text)
            issues.append(
                self._issue(
                    "Method name not PascalCase",
                    f"Method '{token.text}' must use PascalCase.",
                    f"Rename to '{suggestion}'",
                    at=token.span,
                    snippet=token.text,
                )
            )
        if node.has_modifier("async") and not token.text.endswith("Async"):
            issues.append(
                self._issue(
                    "Async method missing Async suffix",
                    f"Method '{token.text}' is async but its name does not end with 'Async'.",
                    f"Rename to '{token.text}Async'",
                    at=token.span,
                    snippet=token.text,
                )
            )

    def _check_parameters(self, node: SyntaxNode, issues: List[Issue]) -> None:
        for token in node.parameters:
            name = token.text
            if name.startswith("_"):
                suggestion = to_camel_case(name.lstrip("_")) or name.lstrip("_")
                issues.append(
                    self._issue(
                        "Parameter starts with underscore",
                        f"Parameter '{name}' must not start with '_'.",
                        f"Rename to '{suggestion}'",
                        at=token.span,
                        snippet=name,
                    )
                )
            elif not self.config.is_keyword(name) and not is_camel_case(name):
                suggestion = to_camel_case(name)
                issues.append(
                    self._issue(
                        "Parameter name not camelCase",
                        f"Parameter '{name}' must use camelCase.",
                        f"Rename to '{suggestion}'",
                        at=token.span,
                        snippet=name,
                    )
                )

    def _check_fields(self, node: SyntaxNode, issues: List[Issue]) -> None:
        is_private = node.has_modifier("private")
        for token in node.declarators:
            name = token.text
            if name[:1].lower() == "p":
                suggestion = "_" + (to_camel_case(name[1:]) if len(name) > 1 else "value")
                issues.append(
                    self._issue(
                        "Forbidden 'p' prefix",
                        f"Field '{name}' uses the Hungarian 'p' prefix.",
                        f"Rename to '{suggestion}'",
                        at=token.span,
                        snippet=name,
                    )
                )
            if is_private and not name.startswith("_"):
                suggestion = "_" + to_camel_case(name)
                issues.append(
                    self._issue(
                        "Private field missing underscore",
                        f"Private field '{name}' must start with '_'.",
                        f"Rename to '{suggestion}'",
                        at=token.span,
                        snippet=name,
                    )
                )
            if name.startswith("_") and len(name) > 1:
                after = name[1:]
                if not self.config.is_keyword(after) and not is_camel_case(after):
                    suggestion = "_" + to_camel_case(after)
                    issues.append(
                        self._issue(
                            "Field not camelCase after underscore",
                            f"Field '{name}' must use camelCase after '_'.",
                            f"Rename to '{suggestion}'",
                            at=token.span,
                            snippet=name,
                        )
                    )

    def _check_string_references(self, node: SyntaxNode, issues: List[Issue]) -> None:
        body = node.body
        if body is None or not node.parameters:
            return
        by_lower = {token.text.lower(): token for token in node.parameters}
        reported: Set[str] = set()
        for literal in body.descendants_of_kind(NodeKind.STRING_LITERAL, NodeKind.INTERPOLATED_STRING):
            for placeholder in scan_placeholders(literal.text):
                token = by_lower.get(placeholder.lower())
                if token is None or token.text in reported:
                    continue
                if self.config.is_keyword(token.text) or is_camel_case(token.text):
                    continue
                reported.add(token.text)
                suggestion = to_camel_case(token.text.lstrip("_")) or token.text
                issues.append(
                    self._issue(
                        "Parameter referenced in string not camelCase",
                        f"Parameter '{token.text}' is referenced in a string at line "
                        f"{literal.span.start_line} but is not camelCase.",
                        f"Rename the parameter to '{suggestion}'",
                        at=token.span,
                        snippet=token.text,
                    )
                )


# ============================================================
# ======================== COMPLEXITY ========================
# ============================================================

BRANCH_KINDS = frozenset(
    {
        NodeKind.IF_STMT,
        NodeKind.FOR_STMT,
        NodeKind.FOREACH_STMT,
        NodeKind.WHILE_STMT,
        NodeKind.DO_STMT,
        NodeKind.CATCH_CLAUSE,
        NodeKind.CONDITIONAL_EXPR,
    }
)

SHORT_CIRCUIT_OPERATORS = frozenset({"&&", "||"})

LOW_COMPLEXITY_LIMIT = 5


def cyclomatic_complexity(body: SyntaxNode) -> int:
    """1 + branches, loops, catch clauses, ternaries, && / || and one per switch section."""
    complexity = 1
    for node in body.walk():
        if node.kind in BRANCH_KINDS:
            complexity += 1
        elif node.kind is NodeKind.SWITCH_STMT:
            complexity += node.sections
        elif node.kind is NodeKind.BINARY_EXPR and node.operator in SHORT_CIRCUIT_OPERATORS:
            complexity += 1
    return complexity


class ComplexityAnalyzer(Analyzer):
    name = "ComplexityAnalyzer"
    category = "Complexity"

    def complexity_level(self, complexity: int) -> str:
        if complexity > self.config.max_complexity:
            return "high"
        if complexity <= LOW_COMPLEXITY_LIMIT:
            return "low"
        return "medium"

    def collect(self, tree: SyntaxTree) -> List[Issue]:
        issues: List[Issue] = []
        limit = self.config.max_complexity
        for method in tree.nodes_of_kind(NodeKind.METHOD_DECL):
            body = method.body
            if body is None:
                continue
            name = method.name or "<anonymous>"
            complexity = cyclomatic_complexity(body)
            level = self.complexity_level(complexity)
            passed = complexity <= limit
            if passed:
                suggestion = "Complexity is within the recommended range."
                verdict = "Within threshold"
            else:
                suggestion = "Split this method into smaller methods to reduce its complexity."
                verdict = f"Exceeds the recommended threshold ({limit})"
            detail = (
                "**Cyclomatic complexity**\n"
                f"Method: `{name}`\n"
                f"Complexity: **{complexity}** -> {level}\n"
                f"{verdict}"
            )
            at = method.identifier.span if method.identifier else method.span
            issues.append(
                self._issue(
                    "Cyclomatic complexity",
                    f"Method '{name}': complexity = {complexity} ({level})",
                    suggestion,
                    at=at,
                    snippet=name,
                    passed=passed,
                    detail=detail,
                )
            )
        return issues


# ============================================================
# ====================== DOCUMENTATION =======================
# ============================================================

_TODO_MARKER = re.compile(r"\b(TODO|FIXME)\b")


class DocumentationAnalyzer(Analyzer):
    name = "DocumentationAnalyzer"
    category = "Documentation"

    LABELS = {
        NodeKind.CLASS_DECL: "class",
        NodeKind.INTERFACE_DECL: "interface",
        NodeKind.METHOD_DECL: "method",
        NodeKind.PROPERTY_DECL: "property",
    }

    def _is_public_surface(self, node: SyntaxNode) -> bool:
        if node.kind is NodeKind.INTERFACE_DECL:
            return True
        return node.kind in self.LABELS and node.has_modifier("public")

    def collect(self, tree: SyntaxTree) -> List[Issue]:
        issues: List[Issue] = []
        total = 0
        documented = 0

        for node in tree.descendant_nodes():
            if not self._is_public_surface(node) or node.identifier is None:
                continue
            total += 1
            label = self.LABELS[node.kind]
            problems, notes = self._inspect(node)
            if problems:
                description = " ".join(problems + notes)
                issues.append(
                    self._issue(
                        f"Undocumented {label}",
                        f"Public {label} '{node.name}': {description}",
                        "Add /// <summary>...</summary> and a <param> tag for every parameter.",
                        at=node.identifier.span,
                        snippet=node.name or "",
                    )
                )
                continue
            documented += 1
            if notes:
                issues.append(
                    self._issue(
                        "Documentation note",
                        f"Public {label} '{node.name}': {' '.join(notes)}",
                        "Resolve the TODO/FIXME markers in the documentation.",
                        at=node.identifier.span,
                        snippet=node.name or "",
                        passed=True,
                    )
                )

        passed = total == 0 or documented == total
        issues.append(
            self._issue(
                "Documentation score",
                f"Documentation coverage: {documented}/{total} items documented.",
                "Document the remaining public members." if not passed else "Documentation is complete.",
                passed=passed,
                detail=f"**Documentation score**: {documented}/{total} items documented",
            )
        )
        return issues

    def _inspect(self, node: SyntaxNode) -> Tuple[List[str], List[str]]:
        problems: List[str] = []
        notes: List[str] = []
        doc = node.doc_comment
        if doc is None:
            problems.append("Missing XML documentation.")
            return problems, notes
        if _TODO_MARKER.search(doc.text):
            notes.append("Contains TODO/FIXME.")
        if node.kind is NodeKind.METHOD_DECL:
            for parameter in node.parameters:
                if not re.search(r'<param\s+name\s*=\s*"' + re.escape(parameter.text) + '"', doc.text):
                    problems.append(f"Parameter '{parameter.text}' undocumented.")
        return problems, notes


# ============================================================
# ===================== DUPLICATE CODE =======================
# ============================================================

PREVIEW_LIMIT = 200


def block_hash(block: SyntaxNode) -> str:
    return hashlib.sha256(block.canonical_text().encode("utf-8")).hexdigest()


def _preview(text: str, limit: int = PREVIEW_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class DuplicateCodeAnalyzer(Analyzer):
    name = "DuplicateCodeAnalyzer"
    category = "DuplicateCode"

    def clusters(self, tree: SyntaxTree) -> List[List[SyntaxNode]]:
        """Blocks grouped by canonical hash, first-seen order, only groups of two or more."""
        groups: Dict[str, List[SyntaxNode]] = {}
        for block in tree.nodes_of_kind(NodeKind.BLOCK):
            if not block.statements:
                continue
            groups.setdefault(block_hash(block), []).append(block)
        return [members for members in groups.values() if len(members) > 1]

    def collect(self, tree: SyntaxTree) -> List[Issue]:
        issues: List[Issue] = []
        for members in self.clusters(tree):
            size = len(members)
            preview = _preview(members[0].canonical_text())
            lines = ", ".join(str(block.span.start_line) for block in members)
            detail = (
                "**Duplicate code detected**\n"
                f"Occurrences: {size} (lines {lines})\n"
                f"Excerpt:\n```csharp\n{preview}\n```\n"
                "Consider extracting this code into a shared method."
            )
            for block in members:
                issues.append(
                    self._issue(
                        "Duplicate code",
                        f"Duplicate block found ({size} occurrences)",
                        "Extract this shared code into a common method.",
                        at=block.span,
                        snippet=preview,
                        detail=detail,
                    )
                )
        return issues


# ============================================================
# ======================= UNUSED CODE ========================
# ============================================================

def _has_reference(scope: SyntaxNode, name: str, declared_at: Span) -> bool:
    for node in scope.descendants_of_kind(NodeKind.IDENTIFIER_REF):
        if node.span != declared_at and node.text.lstrip("@") == name:
            return True
    return False


class UnusedCodeAnalyzer(Analyzer):
    name = "UnusedCodeAnalyzer"
    category = "UnusedCode"

    def collect(self, tree: SyntaxTree) -> List[Issue]:
        issues: List[Issue] = []
        root = tree.root
        invoked = {
            node.callee_name for node in tree.nodes_of_kind(NodeKind.INVOCATION_EXPR) if node.callee_name
        }

        for node in tree.descendant_nodes():
            if node.kind is NodeKind.LOCAL_DECL:
                # Nearest enclosing block: method, accessor, operator or lambda
                # body. Top-level statements use the whole unit.
                scope_body = node.enclosing((NodeKind.BLOCK,)) or root
                for token in node.declarators:
                    if not _has_reference(scope_body, token.text, token.span):
                        issues.append(
                            self._issue(
                                "Unused local variable",
                                f"Local variable '{token.text}' is never used.",
                                "Remove this variable or use it.",
                                at=token.span,
                                snippet=token.text,
                            )
                        )
            elif node.kind in MEMBER_SCOPE_KINDS:
                body = node.body
                if body is None:
                    continue
                for token in node.parameters:
                    if not _has_reference(body, token.text, token.span):
                        issues.append(
                            self._issue(
                                "Unused parameter",
                                f"Parameter '{token.text}' of '{node.name}' is never used.",
                                "Remove this parameter or use it.",
                                at=token.span,
                                snippet=token.text,
                            )
                        )
                if (
                    node.kind is NodeKind.METHOD_DECL
                    and node.has_modifier("private")
                    and node.name not in invoked
                    and node.identifier is not None
                ):
                    issues.append(
                        self._issue(
                            "Unused private method",
                            f"Private method '{node.name}' is never called.",
                            "Remove this method or call it.",
                            at=node.identifier.span,
                            snippet=node.name or "",
                        )
                    )
            elif node.kind is NodeKind.FIELD_DECL and node.has_modifier("private"):
                for token in node.declarators:
                    if not _has_reference(root, token.text, token.span):
                        issues.append(
                            self._issue(
                                "Unused private field",
                                f"Private field '{token.text}' is never used.",
                                "Remove this field or use it.",
                                at=token.span,
                                snippet=token.text,
                            )
                        )
        return issues


# ============================================================
# ========================= SIZE =============================
# ============================================================

def method_line_count(method: SyntaxNode) -> int:
    body = method.body
    end_line = body.span.end_line if body is not None else method.span.start_line
    return end_line - method.span.start_line + 1


class SizeAnalyzer(Analyzer):
    name = "SizeAnalyzer"
    category = "Size"

    def collect(self, tree: SyntaxTree) -> List[Issue]:
        issues: List[Issue] = []
        max_lines = self.config.max_method_lines
        max_parameters = self.config.max_parameters
        for method in tree.nodes_of_kind(NodeKind.METHOD_DECL):
            name = method.name or "<anonymous>"
            at = method.identifier.span if method.identifier else method.span
            lines = method_line_count(method)
            parameter_count = len(method.parameters)
            summary = f"Method: `{name}`\nLines: {lines}, parameters: {parameter_count}"

            if lines > max_lines:
                suggestion = "Split this method into smaller methods."
                issues.append(
                    self._issue(
                        "Method too long",
                        f"Method '{name}' has {lines} lines (> {max_lines}).",
                        suggestion,
                        at=at,
                        snippet=name,
                        detail=f"**Method too long**\n{summary}\nSuggestion: {suggestion}",
                    )
                )
            if parameter_count > max_parameters:
                suggestion = "Group the parameters into a parameter object or record."
                issues.append(
                    self._issue(
                        "Too many parameters",
                        f"Method '{name}' has {parameter_count} parameters (> {max_parameters}).",
                        suggestion,
                        at=at,
                        snippet=name,
                        detail=f"**Too many parameters**\n{summary}\nSuggestion: {suggestion}",
                    )
                )
        return issues


# ============================================================
# ======================= EXCEPTIONS =========================
# ============================================================

ROOT_EXCEPTION_TYPES = frozenset({"Exception", "System.Exception", "global::System.Exception"})

# (pattern over invocation callee text, label)
BLOCKING_CALL_PATTERNS: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(^|\.)Thread\.Sleep$"), "Thread.Sleep()"),
    (re.compile(r"\.Wait(All|Any)?$"), ".Wait()"),
    (re.compile(r"\.GetAwaiter\(\)\.GetResult$"), ".GetAwaiter().GetResult()"),
)


def blocking_call_label(node: SyntaxNode) -> Optional[str]:
    if node.kind is NodeKind.INVOCATION_EXPR and node.callee:
        callee = re.sub(r"\s+", "", node.callee)
        for pattern, label in BLOCKING_CALL_PATTERNS:
            if pattern.search(callee):
                return label
    if node.kind is NodeKind.MEMBER_ACCESS and node.member_name == "Result":
        return ".Result"
    return None


class ExceptionAnalyzer(Analyzer):
    name = "ExceptionAnalyzer"
    category = "Exception"

    def collect(self, tree: SyntaxTree) -> List[Issue]:
        issues: List[Issue] = []
        for node in tree.nodes_of_kind(NodeKind.CATCH_CLAUSE):
            self._check_catch(node, issues)
        self._check_blocking_calls(tree, issues)
        return issues

    def _check_catch(self, node: SyntaxNode, issues: List[Issue]) -> None:
        if node.type_name is None or node.type_name in ROOT_EXCEPTION_TYPES:
            caught = node.type_name or "unspecified"
            issues.append(
                self._issue(
                    "Generic catch",
                    f"Catch clause is too generic (type: {caught}).",
                    "Catch a more specific exception (e.g. IOException, InvalidOperationException).",
                    at=node.span,
                    snippet="catch",
                )
            )

        body = node.body
        if body is not None and not body.statements:
            issues.append(
                self._issue(
                    "Empty catch",
                    "Empty catch block silently swallows the exception.",
                    "Log the exception, rethrow it, or remove the handler.",
                    at=node.span,
                    snippet="catch",
                )
            )

        caught_name = node.name
        if caught_name is None or body is None:
            return
        for throw in body.descendants_of_kind(NodeKind.THROW_STMT):
            if throw.name == caught_name:
                issues.append(
                    self._issue(
                        "Rethrow by reference",
                        f"'throw {caught_name};' resets the original stack trace.",
                        "Replace with 'throw;'",
                        at=throw.span,
                        snippet=throw.text,
                    )
                )

    def _check_blocking_calls(self, tree: SyntaxTree, issues: List[Issue]) -> None:
        seen: Set[Tuple[NodeKind, Span]] = set()
        for method in tree.nodes_of_kind(NodeKind.METHOD_DECL):
            body = method.body
            if body is None or not method.has_modifier("async"):
                continue
            for node in body.walk():
                label = blocking_call_label(node)
                if label is None or (node.kind, node.span) in seen:
                    continue
                seen.add((node.kind, node.span))
                issues.append(
                    self._issue(
                        "Blocking call in async method",
                        f"'{node.text}' ({label}) blocks the thread inside async method '{method.name}'.",
                        "Use await with the asynchronous API instead (e.g. await Task.Delay).",
                        at=node.span,
                        snippet=node.text,
                    )
                )


# ============================================================
# ====================== ORCHESTRATION =======================
# ============================================================

ANALYZER_TYPES: Tuple[type, ...] = (
    NamingAnalyzer,
    ComplexityAnalyzer,
    DocumentationAnalyzer,
    DuplicateCodeAnalyzer,
    ExceptionAnalyzer,
    SizeAnalyzer,
    UnusedCodeAnalyzer,
)


def default_analyzers(config: AnalyzerConfig) -> List[Analyzer]:
    return [analyzer_type(config) for analyzer_type in ANALYZER_TYPES]


class CodeAnalyzer:
    """
    The orchestrator:
    - validates the configuration up front (ConfigurationError)
    - parses the unit once
    - runs every analyzer, isolating failures into the "Error" category
    - returns a sealed AnalysisResult; analyze() itself never raises
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        analyzers: Optional[Sequence[Analyzer]] = None,
        *,
        parallel: bool = False,
        max_workers: Optional[int] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self.config.validate()
        self.analyzers: List[Analyzer] = (
            list(analyzers) if analyzers is not None else default_analyzers(self.config)
        )
        self.parallel = parallel
        self.max_workers = max_workers
        self._fault_reported: Set[Tuple[str, str]] = set()

    def analyze(
        self,
        source_text: str,
        file_name: str = "Unknown",
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> AnalysisResult:
        result = AnalysisResult(file_name=file_name)
        try:
            if not source_text or not source_text.strip():
                return result.seal()

            try:
                tree = parse_source(source_text)
            except ParseError as exc:
                result.category(ERROR_CATEGORY).add(
                    Issue(
                        rule_name="Analysis failed",
                        description=str(exc),
                        passed=False,
                        suggestion="Fix the syntax error and analyze again.",
                        code_snippet="Parsing error",
                        line=exc.line,
                        column=exc.column,
                        category=ERROR_CATEGORY,
                    )
                )
                return result.seal()

            if self.parallel:
                self._run_parallel(result, tree, cancel_event)
            else:
                self._run_sequential(result, tree, cancel_event)
        except Exception as exc:
            _report(f"Unexpected failure while analyzing {file_name}: {exc}")
            result.category(ERROR_CATEGORY).add(self._fault_issue("CodeAnalyzer", exc))
        return result.seal()

    def _run_sequential(
        self,
        result: AnalysisResult,
        tree: SyntaxTree,
        cancel_event: Optional[threading.Event],
    ) -> None:
        for analyzer in self.analyzers:
            if self._cancelled(result, cancel_event):
                return
            try:
                analyzer.analyze(result, tree)
            except Exception as exc:
                self._record_fault(result, analyzer, exc)

    def _run_parallel(
        self,
        result: AnalysisResult,
        tree: SyntaxTree,
        cancel_event: Optional[threading.Event],
    ) -> None:
        workers = self.max_workers or len(self.analyzers) or 1
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sharpcheck") as pool:
            futures = []
            for analyzer in self.analyzers:
                if self._cancelled(result, cancel_event):
                    break
                futures.append((analyzer, pool.submit(analyzer.collect, tree)))
            # Merge in declared order so output matches the sequential run.
            for analyzer, future in futures:
                try:
                    issues = future.result()
                except Exception as exc:
                    self._record_fault(result, analyzer, exc)
                    continue
                result.category(analyzer.category).extend(issues)

    def _cancelled(self, result: AnalysisResult, cancel_event: Optional[threading.Event]) -> bool:
        if cancel_event is None or not cancel_event.is_set():
            return False
        _report(f"Analysis of {result.file_name} cancelled.")
        result.category(ERROR_CATEGORY).add(
            Issue(
                rule_name="Analysis cancelled",
                description="Analysis was cancelled before all analyzers ran.",
                passed=False,
                suggestion="Run the analysis again to get a complete report.",
                category=ERROR_CATEGORY,
            )
        )
        return True

    def _record_fault(self, result: AnalysisResult, analyzer: Analyzer, exc: Exception) -> None:
        key = (analyzer.name, str(exc))
        if key not in self._fault_reported:
            _report(f"Analyzer '{analyzer.name}' failed on {result.file_name}: {exc}")
            self._fault_reported.add(key)
        result.category(ERROR_CATEGORY).add(self._fault_issue(analyzer.name, exc))

    @staticmethod
    def _fault_issue(analyzer_name: str, exc: Exception) -> Issue:
        return Issue(
            rule_name="Analyzer failed",
            description=f"Analyzer '{analyzer_name}' failed: {exc}",
            passed=False,
            suggestion="Report this failure; the other analyzers' results are still valid.",
            code_snippet=analyzer_name,
            category=ERROR_CATEGORY,
        )


_DEFAULT_ENGINE: Optional[CodeAnalyzer] = None


def analyze(source_text: str, file_name: str = "Unknown") -> AnalysisResult:
    """Analyze one C# unit with the default configuration."""
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        _DEFAULT_ENGINE = CodeAnalyzer()
    return _DEFAULT_ENGINE.analyze(source_text, file_name)


# ============================================================
# ====================== RESULT OUTPUT =======================
# ============================================================

def issue_to_json_obj(issue: Issue) -> Dict[str, Any]:
    return {
        "ruleName": issue.rule_name,
        "description": issue.description,
        "passed": issue.passed,
        "suggestion": issue.suggestion,
        "codeSnippet": issue.code_snippet,
        "lineNumber": issue.line,
        "columnNumber": issue.column,
        "category": issue.category,
        "detailMessage": issue.detail_message,
    }


def result_to_json_obj(result: AnalysisResult) -> Dict[str, Any]:
    """
    Convert an AnalysisResult into a JSON-friendly dict.
    Field names and nesting are the stable contract for consumers.
    """
    return {
        "fileName": result.file_name,
        "totalIssues": result.total_issues,
        "categories": [
            {
                "name": category.name,
                "issues": [issue_to_json_obj(issue) for issue in category.issues],
            }
            for category in result.categories
        ],
    }


def emit_result_json(result: AnalysisResult, out: Optional[str] = None) -> None:
    text = json.dumps(result_to_json_obj(result), indent=2, sort_keys=False, ensure_ascii=False)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)
