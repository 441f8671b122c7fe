"""
jsoutline - Test Suite
Tests for Tokenizer, Parser, Validator, Node tree and Outline Model.
"""

import json
import unittest

from jsoutline.config import ParserOptions
from jsoutline.errors import ErrorKind, ErrorState, ScriptSyntaxError
from jsoutline.model import OutlineModel
from jsoutline.nodes import (
    BlockNode, BracketedNode, CommentNode, EmptyNode,
    FunctionCallNode, FunctionNode, NodeType, StatementNode, StringNode,
    UnknownNode,
)
from jsoutline.outline import nodes_to_json, outcome_to_dict, parse_script
from jsoutline.parser import Parser, is_keyword
from jsoutline.tokenizer import Token, tokenize


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════

SIMPLE_SCRIPT = (
    "/* Comment */\n"
    "function test( i ) {\n"
    "    return i;\n"
    "}\n"
)

PROVIDER_SCRIPT = "\n".join([
    "/**",                                                                   # 1
    " * Timetable parser.",                                                  # 2
    " */",                                                                   # 3
    'var TIMETABLE_URL = "http://example.org/timetable?stop=";',             # 4
    "",                                                                      # 5
    "function getTimetable( values ) {",                                     # 6
    "    var url = TIMETABLE_URL + values.stop;",                            # 7
    "    network.getSynchronous( url, {timeout: 5000} );",                   # 8
    "    return url;",                                                       # 9
    "}",                                                                     # 10
    "",                                                                      # 11
    "function parseTimetable( html ) {",                                     # 12
    "    // Find all departure rows",                                        # 13
    '    var rows = helper.findHtmlTags( html, "tr", {attributes: {"class": "dep"}} );',  # 14
    "    for ( var i = 0; i < rows.length; ++i ) {",                         # 15
    "        var time = rows[i].contents.match( /(\\d+):(\\d+)/ );",         # 16
    "        if ( time == null ) {",                                         # 17
    "            continue;",                                                 # 18
    "        }",                                                             # 19
    "        result.addData( {Target: helper.trim(rows[i].target), Hour: time[1]} );",  # 20
    "    }",                                                                 # 21
    "}",                                                                     # 22
    "",
])

MALFORMED_SCRIPTS = [
    "function test( i } { return i; };{",
    "/* Comment/* function(// /*/\nfunction test( i } {\n    return i;\n};{\n",
    "\nx^}( var = 4 \n* x function()}",
    "x.te st,({ i ):\n    return i;\n}\n",
    "function test(a)\nx = 1;",
    'x = "abc\ny;',
    "/* never closed",
    "foo(a, [b, {c: 1}",
]


def parse_(source: str, **options):
    return parse_script(source, ParserOptions(**options))


def texts(source: str):
    return [t.text for t in tokenize(source)]


def all_nodes(nodes):
    for node in nodes:
        yield from node.walk()


# ═══════════════════════════════════════════════════════════════════════════════
# Tokenizer Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestTokenizer(unittest.TestCase):

    def test_names_and_single_chars(self):
        self.assertEqual(texts("function test( i ) {"),
                         ["function", "test", "(", "i", ")", "{"])

    def test_name_flag(self):
        toks = tokenize("foo = (bar)")
        self.assertEqual([t.is_name for t in toks], [True, False, False, True, False])

    def test_columns_inclusive(self):
        toks = tokenize("function test( i ) {")
        self.assertEqual((toks[1].pos_start, toks[1].pos_end), (9, 12))
        self.assertEqual((toks[3].pos_start, toks[3].pos_end), (15, 15))

    def test_delimiters_split_names(self):
        self.assertEqual(texts("a.b+c"), ["a", ".", "b", "+", "c"])
        self.assertEqual(texts("x\\y"), ["x", "\\", "y"])

    def test_non_delimiter_continues_name(self):
        self.assertEqual(texts("abc@def"), ["abc@def"])

    def test_other_start_chars_are_single_tokens(self):
        self.assertEqual(texts("$x"), ["$", "x"])
        self.assertEqual(texts("@@"), ["@", "@"])

    def test_digits_and_underscore_start_names(self):
        toks = tokenize("_private 42")
        self.assertEqual([t.text for t in toks], ["_private", "42"])
        self.assertTrue(all(t.is_name for t in toks))

    def test_line_tracking(self):
        toks = tokenize("a\n\n  b")
        self.assertEqual([(t.text, t.line, t.pos_start) for t in toks],
                         [("a", 1, 0), ("b", 3, 2)])

    def test_tokens_stay_on_their_line(self):
        for tok in tokenize(PROVIDER_SCRIPT):
            self.assertEqual(tok.pos_end - tok.pos_start + 1, len(tok.text))

    def test_whitespace_between(self):
        a, b, c = tokenize("a  b\n   c")
        self.assertEqual(Token.whitespace_between(a, b), "  ")
        self.assertEqual(Token.whitespace_between(b, c), "\n   ")
        name, plus = tokenize("xy+")
        self.assertEqual(Token.whitespace_between(name, plus), "")
        self.assertTrue(name.adjacent_to(plus))
        self.assertFalse(a.adjacent_to(b))

    def test_empty_source(self):
        self.assertEqual(tokenize(""), [])
        self.assertEqual(tokenize("  \n\t\n"), [])


# ═══════════════════════════════════════════════════════════════════════════════
# Parser Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestParser(unittest.TestCase):

    def test_simple_script(self):
        outcome = parse_(SIMPLE_SCRIPT)
        self.assertFalse(outcome.error.has_error)
        self.assertEqual(len(outcome.nodes), 2)

        comment = outcome.nodes[0]
        self.assertIsInstance(comment, CommentNode)
        self.assertFalse(comment.is_multiline)
        self.assertEqual(comment.text, "Comment")
        self.assertEqual((comment.line, comment.column), (1, 0))

        function = outcome.nodes[1]
        self.assertIsInstance(function, FunctionNode)
        self.assertEqual((function.line, function.column), (2, 0))
        self.assertEqual(function.name, "test")
        self.assertEqual(len(function.arguments), 1)
        argument = function.arguments[0]
        self.assertEqual(argument.to_string(), "i")
        self.assertEqual((argument.line, argument.column), (2, 15))
        self.assertEqual(function.definition.content(), "return i;")
        self.assertEqual(function.definition.children[0].line, 3)
        self.assertEqual(function.definition.children[0].column, 4)
        self.assertEqual(function.end_line, 4)

    def test_malformed_argument_list(self):
        outcome = parse_("function test( i } { return i; };{")
        self.assertTrue(outcome.error.has_error)
        self.assertEqual(outcome.error.kind, ErrorKind.EXPECTED_COMMA)

    def test_malformed_script_with_comment(self):
        outcome = parse_(MALFORMED_SCRIPTS[1])
        self.assertTrue(outcome.error.has_error)
        self.assertIsInstance(outcome.nodes[0], CommentNode)

    def test_malformed_stray_brace(self):
        outcome = parse_("\nx^}( var = 4 \n* x function()}")
        self.assertTrue(outcome.error.has_error)
        self.assertEqual(outcome.error.kind, ErrorKind.MISSING_BODY)
        self.assertIsInstance(outcome.nodes[0], StatementNode)
        self.assertEqual(outcome.nodes[0].text, "x^}")

    def test_malformed_unclosed_bracket(self):
        outcome = parse_("x.te st,({ i ):\n    return i;\n}\n")
        self.assertTrue(outcome.error.has_error)
        self.assertEqual(outcome.error.kind, ErrorKind.UNCLOSED_BRACKET)

    def test_deep_bracket_nesting(self):
        outcome = parse_("x = " + "(" * 600 + ")" * 600 + ";")
        self.assertEqual(outcome.error.kind, ErrorKind.NESTING_TOO_DEEP)
        self.assertIsInstance(outcome.nodes[0], StatementNode)

    def test_deep_block_nesting(self):
        outcome = parse_("{" * 600 + "}" * 600 + "\n// after")
        self.assertEqual(outcome.error.kind, ErrorKind.NESTING_TOO_DEEP)
        self.assertIsInstance(outcome.nodes[0], BlockNode)
        self.assertIsInstance(outcome.nodes[-1], CommentNode)

    def test_nesting_limit_is_configurable(self):
        source = "f(" + "[" * 5 + "]" * 5 + ");"
        self.assertFalse(parse_(source, max_nesting_depth=6).error.has_error)
        self.assertEqual(parse_(source, max_nesting_depth=5).error.kind,
                         ErrorKind.NESTING_TOO_DEEP)

    def test_only_comments_after_error(self):
        outcome = parse_("'abc\n// note\nfunction g() {}\n")
        self.assertEqual(outcome.error.kind, ErrorKind.UNCLOSED_STRING)
        self.assertEqual([type(n) for n in outcome.nodes], [CommentNode])
        self.assertEqual(outcome.nodes[0].text, "note")

    def test_syntax_error_keeps_first(self):
        outcome = parse_("foo(\nfunction ( {")
        self.assertEqual(outcome.error.kind, ErrorKind.EXPECTED_ARGUMENT)
        self.assertEqual(outcome.error.line, 2)

    # ---------------------------------------------------------------- comments

    def test_line_comment(self):
        outcome = parse_("// hello  world\nx;")
        comment, statement = outcome.nodes
        self.assertIsInstance(comment, CommentNode)
        self.assertEqual(comment.text, "hello  world")
        self.assertFalse(comment.block_style)
        self.assertEqual(comment.to_string(), "//hello  world")
        self.assertIsInstance(statement, StatementNode)
        self.assertEqual(statement.text, "x;")

    def test_multiline_comment(self):
        comment = parse_("/* a\n b */").nodes[0]
        self.assertTrue(comment.is_multiline)
        self.assertTrue(comment.block_style)
        self.assertEqual((comment.line, comment.end_line), (1, 2))
        self.assertEqual(comment.to_string(), "/*" + comment.text + "*/")

    def test_empty_block_comment(self):
        outcome = parse_("/**/")
        self.assertFalse(outcome.error.has_error)
        self.assertEqual(outcome.nodes[0].text, "")

    def test_unclosed_comment(self):
        outcome = parse_("/* never closed")
        self.assertEqual(outcome.error.kind, ErrorKind.UNCLOSED_COMMENT)
        self.assertEqual(outcome.nodes, [])

    def test_comment_inside_statement(self):
        statement = parse_("a = 1 /* one */;").nodes[0]
        self.assertIsInstance(statement.children[0], CommentNode)
        self.assertEqual(statement.children[0].text, "one")

    # ---------------------------------------------------------------- strings

    def test_double_quoted_string(self):
        statement = parse_('var s = "hello world";').nodes[0]
        string = statement.children[0]
        self.assertIsInstance(string, StringNode)
        self.assertEqual(string.content(), "hello world")
        self.assertEqual(string.id, "str:hello world")
        self.assertEqual(string.to_string(), '"hello world"')

    def test_single_quoted_string(self):
        string = parse_("x = 'a b';").nodes[0].children[0]
        self.assertEqual(string.text, "a b")
        self.assertEqual(string.delimiter, "'")

    def test_escaped_quote(self):
        string = parse_('x = "a\\"b";').nodes[0].children[0]
        self.assertEqual(string.text, 'a\\"b')

    def test_comment_markers_inside_string(self):
        outcome = parse_('x = "http://example.org";')
        self.assertFalse(outcome.error.has_error)
        self.assertEqual(outcome.nodes[0].children[0].text, "http://example.org")

    def test_regex_after_assignment(self):
        string = parse_("x = /ab+c/;").nodes[0].children[0]
        self.assertIsInstance(string, StringNode)
        self.assertTrue(string.is_regex)
        self.assertEqual(string.text, "ab+c")

    def test_regex_as_first_token(self):
        string = parse_("/ab+c/;").nodes[0]
        self.assertIsInstance(string, StringNode)
        self.assertTrue(string.is_regex)
        self.assertEqual(string.text, "ab+c")

    def test_regex_as_argument(self):
        call = parse_("s.match( /(\\d+)/ );").nodes[0].children[0]
        self.assertIsInstance(call.arguments.children[0], StringNode)

    def test_division_is_not_regex(self):
        outcome = parse_("y = a / b / c;")
        self.assertFalse(outcome.error.has_error)
        self.assertEqual(outcome.nodes[0].children, [])
        self.assertEqual(outcome.nodes[0].text, "y = a / b / c;")

    def test_unclosed_string(self):
        outcome = parse_('x = "abc\ny;')
        self.assertEqual(outcome.error.kind, ErrorKind.UNCLOSED_STRING)
        self.assertEqual(outcome.error.line, 1)

    def test_unclosed_regex(self):
        outcome = parse_("x = /abc\n;")
        self.assertEqual(outcome.error.kind, ErrorKind.UNCLOSED_REGEX)

    # ---------------------------------------------------------------- brackets & calls

    def test_bare_call_and_comma_groups(self):
        statement = parse_("f(a, b + 1, [c]);").nodes[0]
        call = statement.children[0]
        self.assertIsInstance(call, FunctionCallNode)
        self.assertEqual((call.receiver, call.member), ("", "f"))
        self.assertEqual(call.id, "call:f")

        args = call.arguments
        self.assertEqual(args.bracket, "(")
        self.assertEqual(args.to_string(), "(a, b + 1, [c])")
        self.assertEqual(args.comma_separated_count(), 3)
        self.assertEqual([n.text for n in args.comma_separated(1)], ["b + 1"])
        inner = args.comma_separated(2)[0]
        self.assertIsInstance(inner, BracketedNode)
        self.assertEqual(inner.to_string(), "[c]")

    def test_comma_nodes(self):
        args = parse_("f(a, b);").nodes[0].children[0].arguments
        self.assertEqual([type(n) for n in args.children],
                         [UnknownNode, UnknownNode, UnknownNode])
        self.assertEqual(args.children[1].text, ",")

    def test_member_call(self):
        call = parse_("helper.extract(html, 'x');").nodes[0].children[0]
        self.assertIsInstance(call, FunctionCallNode)
        self.assertEqual(call.receiver, "helper")
        self.assertEqual(call.member, "extract")
        self.assertEqual(call.id, "call:helper.extract")
        self.assertEqual((call.line, call.column), (1, 0))
        self.assertEqual(call.arguments.comma_separated_count(), 2)
        self.assertIs(call.arguments.parent, call)

    def test_keyword_before_bracket_is_not_a_call(self):
        statement = parse_("if (x) y();").nodes[0]
        self.assertEqual([type(n) for n in statement.children],
                         [BracketedNode, FunctionCallNode])
        self.assertEqual(statement.children[1].member, "y")

    def test_member_chain_is_not_a_call(self):
        statement = parse_("a.b.c(1);").nodes[0]
        self.assertIsInstance(statement.children[0], BracketedNode)

    def test_square_brackets_are_not_a_call(self):
        statement = parse_("x = rows[i];").nodes[0]
        self.assertIsInstance(statement.children[0], BracketedNode)
        self.assertEqual(statement.children[0].bracket, "[")

    def test_unclosed_bracket(self):
        self.assertEqual(parse_("foo(a, b").error.kind, ErrorKind.UNCLOSED_BRACKET)
        self.assertEqual(parse_("(a }").error.kind, ErrorKind.UNCLOSED_BRACKET)

    # ---------------------------------------------------------------- functions

    def test_anonymous_function(self):
        function = parse_("function(a, b) {}").nodes[0]
        self.assertIsInstance(function, FunctionNode)
        self.assertIsNone(function.name)
        self.assertTrue(function.anonymous)
        self.assertEqual(function.text, "[anonymous]")
        self.assertEqual(function.id, "func:[anonymous]()")

    def test_var_bound_function(self):
        outcome = parse_("var handler = function(a) {\n  return a;\n};")
        self.assertFalse(outcome.error.has_error)
        function = outcome.nodes[0]
        self.assertIsInstance(function, FunctionNode)
        self.assertEqual(function.name, "handler")
        self.assertTrue(function.anonymous)
        self.assertEqual((function.line, function.end_line), (1, 3))

    def test_function_in_object_literal(self):
        statement = parse_("obj = { parse: function(x) { return x; } };").nodes[0]
        block = statement.children[0]
        self.assertIsInstance(block, BlockNode)
        function = block.children[0]
        self.assertIsInstance(function, FunctionNode)
        self.assertEqual(function.name, "parse")
        self.assertEqual(OutlineModel.child_functions(statement), [function])

    def test_signature(self):
        nodes = parse_("function a( x, y ) {}\nfunction b() {}").nodes
        self.assertEqual(nodes[0].signature(), "a( x, y )")
        self.assertEqual(nodes[1].signature(), "b()")
        self.assertEqual(nodes[0].to_string(short=True), "a( x, y )")

    def test_trailing_comma_in_arguments(self):
        self.assertEqual(parse_("function test(a,) {}").error.kind,
                         ErrorKind.EXPECTED_ARGUMENT)

    def test_leading_comma_in_arguments(self):
        self.assertEqual(parse_("function test(, a) {}").error.kind,
                         ErrorKind.EXPECTED_ARGUMENT)

    def test_missing_comma_in_arguments(self):
        self.assertEqual(parse_("function test(a b) {}").error.kind,
                         ErrorKind.EXPECTED_COMMA)

    def test_missing_paren(self):
        outcome = parse_("function test {}")
        self.assertEqual(outcome.error.kind, ErrorKind.EXPECTED_PAREN)
        self.assertEqual(outcome.nodes, [])

    def test_missing_body_keeps_function(self):
        outcome = parse_("function test(a)\nx = 1;")
        self.assertEqual(outcome.error.kind, ErrorKind.MISSING_BODY)
        function = outcome.nodes[0]
        self.assertIsInstance(function, FunctionNode)
        self.assertIsNone(function.definition)
        self.assertEqual([a.text for a in function.arguments], ["a"])

    def test_unclosed_block(self):
        outcome = parse_("function test(a) {\n  return a;\n")
        self.assertEqual(outcome.error.kind, ErrorKind.UNCLOSED_BLOCK)
        self.assertIn("line 1", outcome.error.message)
        self.assertIsInstance(outcome.nodes[0], FunctionNode)

    def test_function_keyword_at_end(self):
        outcome = parse_("function")
        self.assertEqual(outcome.error.kind, ErrorKind.UNEXPECTED_END)
        self.assertEqual(outcome.nodes, [])

    # ---------------------------------------------------------------- statements

    def test_statements(self):
        nodes = parse_("a = 1;\nb = 2;").nodes
        self.assertEqual([n.text for n in nodes], ["a = 1;", "b = 2;"])
        self.assertEqual([n.line for n in nodes], [1, 2])

    def test_statement_ends_with_block(self):
        nodes = parse_("if (a) {\n b();\n} else {\n c();\n}").nodes
        self.assertEqual(len(nodes), 2)
        self.assertTrue(all(isinstance(n, StatementNode) for n in nodes))
        self.assertEqual((nodes[0].line, nodes[0].end_line), (1, 3))
        self.assertEqual((nodes[1].line, nodes[1].end_line), (3, 5))

    def test_unterminated_statement_is_kept(self):
        outcome = parse_("x = 1")
        self.assertEqual(outcome.error.kind, ErrorKind.UNEXPECTED_END)
        self.assertEqual(outcome.nodes[0].text, "x = 1")

    def test_statement_before_closing_brace(self):
        outcome = parse_("function f() {\n  x = 1\n}")
        self.assertFalse(outcome.error.has_error)
        self.assertEqual(outcome.nodes[0].definition.children[0].text, "x = 1")

    def test_missing_semicolon_detection(self):
        outcome = parse_("function f() {\n  x = 1\n}", detect_missing_semicolon=True)
        self.assertEqual(outcome.error.kind, ErrorKind.MISSING_SEMICOLON)
        self.assertEqual(outcome.error.line, 2)

    def test_provider_script(self):
        outcome = parse_(PROVIDER_SCRIPT)
        self.assertFalse(outcome.error.has_error, outcome.error.message)
        functions = [n for n in outcome.nodes if isinstance(n, FunctionNode)]
        self.assertEqual([f.name for f in functions], ["getTimetable", "parseTimetable"])
        self.assertEqual((functions[1].line, functions[1].end_line), (12, 22))
        calls = [n.id for n in all_nodes(outcome.nodes) if isinstance(n, FunctionCallNode)]
        self.assertIn("call:network.getSynchronous", calls)
        self.assertIn("call:helper.findHtmlTags", calls)
        self.assertIn("call:helper.trim", calls)
        self.assertIn("call:result.addData", calls)

    def test_keywords(self):
        self.assertTrue(is_keyword("function"))
        self.assertTrue(is_keyword("Return"))
        self.assertFalse(is_keyword("helper"))

    def test_parser_alone_skips_validation(self):
        src = "function test( i ) {\n}\nfunction test( a, b ) {\n}\n"
        parser = Parser(tokenize(src))
        nodes = parser.parse()
        self.assertEqual(len(nodes), 2)
        self.assertFalse(parser.error.has_error)


# ═══════════════════════════════════════════════════════════════════════════════
# Validator Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestValidator(unittest.TestCase):

    def test_duplicate_functions(self):
        outcome = parse_("function test( i ) {\n}\nfunction test( a, b ) {\n}\n")
        error = outcome.error
        self.assertTrue(error.has_error)
        self.assertEqual(error.kind, ErrorKind.DUPLICATE_FUNCTION)
        self.assertTrue(error.kind.is_informational)
        self.assertIn("test", error.message)
        self.assertEqual(error.line, 3)
        self.assertEqual(error.affected_line, 1)
        self.assertEqual(len(outcome.nodes), 2)

    def test_distinct_functions(self):
        self.assertFalse(parse_("function a() {}\nfunction b() {}").error.has_error)

    def test_anonymous_functions_are_not_duplicates(self):
        self.assertFalse(parse_("function() {}\nfunction() {}").error.has_error)

    def test_syntax_error_wins_over_duplicates(self):
        outcome = parse_("function a() {}\nfunction a() {}\nfoo(")
        self.assertEqual(outcome.error.kind, ErrorKind.UNCLOSED_BRACKET)

    def test_unknown_member(self):
        known = {"helper": ["extract", "trim"]}
        outcome = parse_("helper.extrct(x);", known_members=known)
        self.assertEqual(outcome.error.kind, ErrorKind.UNKNOWN_MEMBER)
        self.assertIn("extrct", outcome.error.message)
        self.assertIn("extract, trim", outcome.error.message)

    def test_known_member(self):
        known = {"helper": ["extract", "trim"]}
        self.assertFalse(parse_("helper.trim(x);", known_members=known).error.has_error)
        self.assertFalse(parse_("other.thing(x);", known_members=known).error.has_error)

    def test_member_check_is_inert_without_table(self):
        self.assertFalse(parse_("helper.anything(x);").error.has_error)

    def test_member_check_in_nested_code(self):
        outcome = parse_(PROVIDER_SCRIPT, known_members={"helper": ["trim"]})
        self.assertEqual(outcome.error.kind, ErrorKind.UNKNOWN_MEMBER)
        self.assertIn("findHtmlTags", outcome.error.message)
        self.assertEqual(outcome.error.line, 14)


# ═══════════════════════════════════════════════════════════════════════════════
# Error State Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestErrorState(unittest.TestCase):

    def test_first_error_wins(self):
        error = ErrorState()
        self.assertTrue(error.set(ErrorKind.UNCLOSED_BLOCK, "first", 3, 1))
        self.assertFalse(error.set(ErrorKind.UNEXPECTED_END, "second", 9, 9))
        self.assertEqual((error.message, error.line, error.column), ("first", 3, 1))
        self.assertEqual(error.kind, ErrorKind.UNCLOSED_BLOCK)

    def test_clear(self):
        error = ErrorState()
        error.set(ErrorKind.INTERNAL, "oops", 1)
        error.clear()
        self.assertFalse(error.has_error)
        self.assertEqual(error.line, -1)
        self.assertEqual(error.affected_line, -1)

    def test_strict_raises(self):
        with self.assertRaises(ScriptSyntaxError) as ctx:
            parse_script("foo(", strict=True)
        self.assertTrue(str(ctx.exception).startswith("[ScriptSyntaxError] Line 1:"))
        self.assertEqual(ctx.exception.kind, ErrorKind.UNCLOSED_BRACKET)

    def test_strict_passes_clean_source(self):
        outcome = parse_script(SIMPLE_SCRIPT, strict=True)
        self.assertEqual(len(outcome.nodes), 2)


# ═══════════════════════════════════════════════════════════════════════════════
# Node Tree Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestNodes(unittest.TestCase):

    def setUp(self):
        self.nodes = parse_(SIMPLE_SCRIPT).nodes
        self.function = self.nodes[1]
        self.statement = self.function.definition.children[0]

    def test_parent_links(self):
        self.assertIsNone(self.function.parent)
        self.assertIs(self.function.arguments[0].parent, self.function)
        self.assertIs(self.function.definition.parent, self.function)
        self.assertIs(self.statement.parent, self.function.definition)

    def test_search_up(self):
        self.assertIs(self.statement.search_up(FunctionNode), self.function)
        self.assertIs(self.statement.search_up(StatementNode), self.statement)
        self.assertIsNone(self.statement.search_up(FunctionNode, max_levels=1))
        self.assertIs(self.statement.search_up(FunctionNode, max_levels=2), self.function)

    def test_top_level_parent(self):
        self.assertIs(self.statement.top_level_parent(), self.function)
        self.assertIs(self.function.top_level_parent(), self.function)

    def test_children_of_function(self):
        self.assertEqual(self.function.children,
                         self.function.arguments + [self.function.definition])

    def test_ids(self):
        self.assertEqual(self.function.id, "func:test()")
        self.assertEqual(self.function.arguments[0].id, "arg:i")
        self.assertEqual(EmptyNode(text="x").id, "")

    def test_node_types(self):
        self.assertEqual(self.function.node_type, NodeType.FUNCTION)
        self.assertEqual(self.nodes[0].node_type, NodeType.COMMENT)
        self.assertIn(NodeType.ARGUMENT, NodeType.ALL)
        self.assertEqual(EmptyNode().node_type, NodeType.NONE)

    def test_is_in_range(self):
        self.assertTrue(self.function.is_in_range(3))
        self.assertTrue(self.function.is_in_range(2, 0))
        self.assertFalse(self.function.is_in_range(5))
        self.assertTrue(self.statement.is_in_range(3, 12))
        self.assertFalse(self.statement.is_in_range(3, 13))

    def test_child_from_position(self):
        self.assertIs(self.function.child_from_position(3, 6), self.statement)
        self.assertIs(self.function.child_from_position(2, 15), self.function.arguments[0])
        self.assertIs(self.function.child_from_position(2, 10), self.function)
        self.assertIsNone(self.function.child_from_position(9, 0))

    def test_block_rendering(self):
        block = self.function.definition
        self.assertEqual(block.to_string(), "{return i;\n}")
        self.assertEqual(self.function.to_string(), "test( i ) {return i;\n}")

    def test_ranges_are_well_formed(self):
        for source in [SIMPLE_SCRIPT, PROVIDER_SCRIPT] + MALFORMED_SCRIPTS:
            for node in all_nodes(parse_(source).nodes):
                self.assertLessEqual((node.line, node.column),
                                     (node.end_line, node.column_end), source)
                for child in node.children:
                    self.assertIs(child.parent, node)
                    self.assertGreaterEqual((child.line, child.column),
                                            (node.line, node.column), source)
                    self.assertLessEqual((child.end_line, child.column_end),
                                         (node.end_line, node.column_end), source)

    def test_top_level_sorted_by_line(self):
        for source in [SIMPLE_SCRIPT, PROVIDER_SCRIPT] + MALFORMED_SCRIPTS:
            lines = [node.line for node in parse_(source).nodes]
            self.assertEqual(lines, sorted(lines))

    def test_deterministic(self):
        for source in [PROVIDER_SCRIPT] + MALFORMED_SCRIPTS:
            first = outcome_to_dict(parse_(source))
            second = outcome_to_dict(parse_(source))
            self.assertEqual(first, second)

    def test_json_dump(self):
        data = json.loads(nodes_to_json(self.nodes))
        self.assertEqual(data[0]["_type"], "CommentNode")
        self.assertEqual(data[1]["name"], "test")
        self.assertEqual(data[1]["id"], "func:test()")
        self.assertEqual([c["_type"] for c in data[1]["children"]],
                         ["ArgumentNode", "BlockNode"])


# ═══════════════════════════════════════════════════════════════════════════════
# Outline Model Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestOutlineModel(unittest.TestCase):

    def test_empty_model(self):
        model = OutlineModel()
        self.assertEqual(model.row_count(), 1)
        self.assertIsInstance(model.placeholder, EmptyNode)
        self.assertEqual(model.placeholder.text, "(no functions)")
        self.assertIs(model.node_before_line(5), model.placeholder)
        self.assertIs(model.node_after_line(5, NodeType.FUNCTION), model.placeholder)
        self.assertIsNone(model.node_at_position(1, 0))

    def test_set_nodes(self):
        model = OutlineModel(parse_(SIMPLE_SCRIPT).nodes)
        self.assertEqual(model.row_count(), 3)
        self.assertEqual(model.placeholder.text, "1 function:")
        self.assertEqual(model.function_names(), ["test"])
        self.assertIsInstance(model.node_from_row(2), FunctionNode)
        self.assertEqual(model.index_of(model.node_from_row(1)), 1)
        self.assertEqual(model.index_of(FunctionNode(name="other")), -1)

    def test_node_from_row_out_of_range(self):
        with self.assertRaises(ValueError):
            OutlineModel().node_from_row(1)

    def test_node_before_line(self):
        model = OutlineModel(parse_(SIMPLE_SCRIPT).nodes)
        function = model.functions()[0]
        self.assertIs(model.node_before_line(10, NodeType.FUNCTION), function)
        self.assertIs(model.node_before_line(3, NodeType.FUNCTION), function)
        self.assertIs(model.node_before_line(1, NodeType.FUNCTION), model.placeholder)
        self.assertIsInstance(model.node_before_line(2, NodeType.COMMENT), CommentNode)

    def test_node_after_line(self):
        model = OutlineModel(parse_(PROVIDER_SCRIPT).nodes)
        get_timetable, parse_timetable = model.functions()
        self.assertIs(model.node_after_line(1, NodeType.FUNCTION), get_timetable)
        self.assertIs(model.node_after_line(7, NodeType.FUNCTION), parse_timetable)
        self.assertIs(model.node_after_line(6, NodeType.FUNCTION), get_timetable)
        self.assertIs(model.node_after_line(30, NodeType.FUNCTION), model.placeholder)
        self.assertIs(model.node_before_line(15, NodeType.FUNCTION), parse_timetable)
        self.assertIs(model.node_before_line(11, NodeType.FUNCTION), get_timetable)

    def test_node_at_position(self):
        model = OutlineModel(parse_(SIMPLE_SCRIPT).nodes)
        function = model.functions()[0]
        self.assertIs(model.node_at_position(3, 6), function)
        self.assertIsInstance(model.node_at_position(3, 6, descend=True), StatementNode)
        self.assertIsInstance(model.node_at_position(1, 4), CommentNode)
        self.assertIsNone(model.node_at_position(1, 40))

    def test_id_at_position(self):
        model = OutlineModel(parse_(SIMPLE_SCRIPT).nodes)
        self.assertEqual(model.id_at_position(2, 15), "arg:i")
        self.assertEqual(model.id_at_position(2, 10), "func:test()")
        self.assertIsNone(model.id_at_position(7, 0))

    def test_clear(self):
        model = OutlineModel(parse_(SIMPLE_SCRIPT).nodes)
        old_placeholder = model.placeholder
        model.clear()
        self.assertEqual(model.row_count(), 1)
        self.assertIsNot(model.placeholder, old_placeholder)
        self.assertEqual(model.placeholder.text, "(no functions)")

    def test_remove_rows(self):
        model = OutlineModel(parse_(SIMPLE_SCRIPT).nodes)
        model.remove_rows(1, 1)
        self.assertEqual(model.row_count(), 2)
        self.assertEqual(model.placeholder.text, "1 function:")
        model.remove_rows(0, model.row_count())
        self.assertEqual(len(model.nodes()), 1)
        self.assertIsInstance(model.nodes()[0], EmptyNode)
        self.assertEqual(model.nodes()[0].text, "(no functions)")

    def test_remove_rows_out_of_range(self):
        with self.assertRaises(ValueError):
            OutlineModel().remove_rows(0, 2)

    def test_append_keeps_line_order(self):
        model = OutlineModel(parse_("function b() {}\n\nfunction c() {}").nodes)
        model.append_nodes(parse_("\nfunction a() {}").nodes)
        self.assertEqual(model.function_names(), ["b", "a", "c"])
        self.assertEqual(model.placeholder.text, "3 functions:")
        self.assertEqual(sum(isinstance(n, EmptyNode) for n in model.nodes()), 1)

    def test_set_nodes_replaces(self):
        model = OutlineModel(parse_(PROVIDER_SCRIPT).nodes)
        model.set_nodes(parse_(SIMPLE_SCRIPT).nodes)
        self.assertEqual(model.function_names(), ["test"])
        self.assertEqual(model.row_count(), 3)

    def test_node_type_name(self):
        self.assertEqual(OutlineModel.node_type_name(NodeType.FUNCTION_CALL), "Function Call")
        self.assertEqual(OutlineModel.node_type_name(NodeType.FUNCTION), "Function")


if __name__ == "__main__":
    unittest.main(verbosity=2)
