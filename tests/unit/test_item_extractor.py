"""Tests for flattening file matches into symbols, files and references."""

from tests.helpers.fake_backend import (
    b64,
    file_match,
    files_with_symbols,
    symbol_chunk,
    usage_chunk,
)
from zoekt_mcp.core.types import (
    ChunkMatch,
    LineMatch,
    MatchRange,
    Position,
    ReferenceType,
    SymbolInfo,
    SymbolKind,
)
from zoekt_mcp.services.item_extractor import (
    decode_content,
    extract_definitions,
    extract_files,
    extract_symbols,
    extract_usages,
)


class TestDecodeContent:
    def test_base64(self):
        assert decode_content(b64("func main() {}")) == "func main() {}"

    def test_invalid_base64_returned_unchanged(self):
        assert decode_content("not base64!") == "not base64!"

    def test_empty(self):
        assert decode_content("") == ""


class TestExtractSymbols:
    """Symbol extraction from chunk symbol metadata."""

    def test_one_symbol_per_range(self):
        symbols = extract_symbols(files_with_symbols(3, symbols_per_file=5))
        assert len(symbols) == 15
        assert [s.name for s in symbols[:6]] == [
            "func_0_0",
            "func_0_1",
            "func_0_2",
            "func_0_3",
            "func_0_4",
            "func_1_0",
        ]

    def test_position_comes_from_matching_range(self):
        fm = file_match(
            "api/server.go",
            chunks=(symbol_chunk([("Serve", "func", 42), ("Handler", "type", 50)]),),
        )
        symbols = extract_symbols([fm])
        assert (symbols[0].line, symbols[0].column) == (42, 5)
        assert (symbols[1].line, symbols[1].column) == (50, 5)
        assert symbols[0].kind is SymbolKind.FUNCTION
        assert symbols[1].kind is SymbolKind.TYPE
        assert symbols[0].file == "api/server.go"
        assert symbols[0].repository == "github.com/acme/api"

    def test_null_entries_skipped(self):
        chunk = ChunkMatch(
            content=b64("x"),
            content_start=Position(line_number=1, column=1),
            symbol_info=(None, SymbolInfo(sym="Run", kind="method")),
        )
        symbols = extract_symbols([file_match("a.go", chunks=(chunk,))])
        assert [s.name for s in symbols] == ["Run"]
        # No matching range: fall back to the chunk start
        assert symbols[0].line == 1

    def test_parent_carried_when_present(self):
        chunk = symbol_chunk(
            [("run", "member", 7)], parent="Worker", parent_kind="class"
        )
        symbol = extract_symbols([file_match("w.py", chunks=(chunk,))])[0]
        assert symbol.kind is SymbolKind.METHOD
        assert symbol.parent == "Worker"
        assert symbol.parent_kind is SymbolKind.CLASS
        assert symbol.to_dict()["parent_kind"] == "class"

    def test_unknown_kind(self):
        chunk = symbol_chunk([("X", "macro", 1)])
        assert extract_symbols([file_match("x.c", chunks=(chunk,))])[0].kind is (
            SymbolKind.UNKNOWN
        )

    def test_file_without_symbols_yields_nothing(self):
        assert extract_symbols([file_match("README.md")]) == []


class TestExtractFiles:
    def test_one_record_per_file_without_content(self):
        matches = [
            file_match("a.py", chunks=(usage_chunk(1, "secret"),)),
            file_match("b.py", language=""),
        ]
        files = extract_files(matches)
        assert [f.file for f in files] == ["a.py", "b.py"]
        for record in files:
            assert "content" not in record.to_dict()
        assert files[0].language == "Python"
        assert "language" not in files[1].to_dict()
        assert files[0].branches == ["main"]


class TestExtractDefinitions:
    def test_definitions_carry_symbol_and_context(self):
        chunk = symbol_chunk([("foo", "function", 10)], content="  def foo():\n")
        refs = extract_definitions([file_match("a.py", chunks=(chunk,))])
        assert len(refs) == 1
        assert refs[0].type is ReferenceType.DEFINITION
        assert refs[0].context == "def foo():"
        assert refs[0].symbol is not None
        assert refs[0].symbol.name == "foo"
        assert refs[0].to_dict()["symbol"]["name"] == "foo"


class TestExtractUsages:
    """Usages from both wire shapes."""

    def test_chunk_usage_at_first_range(self):
        refs = extract_usages(
            [file_match("b.py", chunks=(usage_chunk(20, "  foo()  ", column=3),))]
        )
        assert len(refs) == 1
        assert refs[0].type is ReferenceType.USAGE
        assert (refs[0].line, refs[0].column) == (20, 3)
        assert refs[0].context == "foo()"
        assert "symbol" not in refs[0].to_dict()

    def test_merged_chunk_yields_one_usage_per_line(self):
        chunk = ChunkMatch(
            content=b64("foo := 1\nfoo += 2\nbar(foo, foo)\n"),
            content_start=Position(line_number=10, column=1),
            ranges=(
                MatchRange(start=Position(line_number=10, column=1)),
                MatchRange(start=Position(line_number=12, column=5)),
                MatchRange(start=Position(line_number=12, column=10)),
            ),
        )

        refs = extract_usages([file_match("a.go", chunks=(chunk,))])

        assert [(r.line, r.column) for r in refs] == [(10, 1), (12, 5)]
        assert refs[0].context == refs[1].context == "foo := 1\nfoo += 2\nbar(foo, foo)"

    def test_chunk_without_ranges_uses_chunk_start(self):
        chunk = ChunkMatch(
            content=b64("foo()"), content_start=Position(line_number=8, column=1)
        )
        refs = extract_usages([file_match("a.go", chunks=(chunk,))])
        assert [(r.line, r.column) for r in refs] == [(8, 1)]

    def test_line_matches(self):
        lines = (
            LineMatch(line=b64("  foo(1)"), line_number=4, line_start=2),
            LineMatch(line=b64("foo.py"), line_number=0, file_name=True),
        )
        refs = extract_usages([file_match("c.py", lines=lines)])
        assert len(refs) == 1
        assert (refs[0].line, refs[0].column, refs[0].context) == (4, 2, "foo(1)")

    def test_file_name_chunks_skipped(self):
        chunk = ChunkMatch(
            content=b64("foo.py"),
            content_start=Position(line_number=0),
            file_name=True,
        )
        assert extract_usages([file_match("foo.py", chunks=(chunk,))]) == []
