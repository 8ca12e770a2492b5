"""Tests for plugin source resolution and plugin registration."""

from __future__ import annotations

import pytest

from supply.core.errors import SourceResolutionError
from supply.plugin import PluginSpecification, resolve_source


def server(request):
    pass


# ---------------------------------------------------------------------------
# resolve_source
# ---------------------------------------------------------------------------

class TestResolveSource:
    def test_line_comment_is_inline_source(self):
        code = "// client\nconsole.log('hi');"

        assert resolve_source(code) == code

    def test_block_comment_is_inline_source(self):
        code = "/* library */ var x = 1;"

        assert resolve_source(code) == code

    def test_path_is_read(self, tmp_path):
        path = tmp_path / "client.js"
        path.write_text("var client = true;", encoding="utf-8")

        assert resolve_source(str(path)) == "var client = true;"

    def test_pathlike_is_read(self, tmp_path):
        path = tmp_path / "library.js"
        path.write_text("// lib", encoding="utf-8")

        assert resolve_source(path) == "// lib"

    def test_absolute_path_starting_with_slash_is_read(self, tmp_path):
        path = tmp_path / "abs.js"
        path.write_text("abs", encoding="utf-8")

        assert str(path).startswith("/")
        assert resolve_source(str(path)) == "abs"

    def test_bytes_are_decoded(self):
        assert resolve_source("// héllo".encode("utf-8")) == "// héllo"

    def test_bytearray_and_memoryview(self):
        assert resolve_source(bytearray(b"x = 1")) == "x = 1"
        assert resolve_source(memoryview(b"y = 2")) == "y = 2"

    def test_none_and_empty_resolve_to_empty(self):
        assert resolve_source(None) == ""
        assert resolve_source("") == ""

    def test_missing_path_raises(self, tmp_path):
        missing = str(tmp_path / "nope.js")

        with pytest.raises(SourceResolutionError, match="no such file") as exc_info:
            resolve_source(missing)
        assert exc_info.value.source == missing

    def test_inline_code_without_comment_falls_through_to_path(self):
        with pytest.raises(SourceResolutionError):
            resolve_source("var x = 1;")

    def test_invalid_utf8_bytes_raise(self):
        with pytest.raises(SourceResolutionError, match="UTF-8"):
            resolve_source(b"\xff\xfe\xfa")

    def test_invalid_utf8_file_raises(self, tmp_path):
        path = tmp_path / "binary.bin"
        path.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(SourceResolutionError, match="UTF-8"):
            resolve_source(str(path))

    def test_directory_raises(self, tmp_path):
        with pytest.raises(SourceResolutionError):
            resolve_source(str(tmp_path))

    def test_unsupported_type_raises(self):
        with pytest.raises(SourceResolutionError, match="unsupported type"):
            resolve_source(42)


# ---------------------------------------------------------------------------
# PluginSpecification
# ---------------------------------------------------------------------------

class TestPluginSpecification:
    def test_build_resolves_sources(self, tmp_path):
        path = tmp_path / "client.js"
        path.write_text("client()", encoding="utf-8")

        spec = PluginSpecification.build(
            "chat", server, client=str(path), library="// lib",
        )

        assert spec.name == "chat"
        assert spec.server is server
        assert spec.fn is server
        assert spec.arity == 1
        assert spec.client == "client()"
        assert spec.library == "// lib"

    def test_sources_default_to_empty(self):
        spec = PluginSpecification.build("chat", server)

        assert spec.client == ""
        assert spec.library == ""

    def test_build_fails_on_bad_source(self):
        with pytest.raises(SourceResolutionError):
            PluginSpecification.build("chat", server, client="missing.js")


class TestSupplyPlugin:
    def test_registers_plugin_as_layer(self, supply, emitter):
        result = supply.plugin("chat", server, client="// c", library="// l")

        assert result is emitter
        assert supply.index_of("chat") == 0
        assert supply.plugins()[0].client == "// c"
        assert emitter.get_history("use")[0][1] is supply.get("chat")

    def test_plugin_server_runs_in_walk(self, supply, done):
        seen = []
        supply.use("plain", lambda request: seen.append("plain"))
        supply.plugin("chat", lambda request: seen.append("chat"), at=0)

        supply.each("req", done)

        assert seen == ["chat", "plain"]
        assert done.once == (None, False)

    def test_plugins_lists_only_plugin_layers(self, supply):
        supply.use("plain", server)
        supply.plugin("chat", server)
        supply.plugin("video", server)

        assert [spec.name for spec in supply.plugins()] == ["chat", "video"]

    def test_bad_source_registers_nothing(self, supply, emitter):
        with pytest.raises(SourceResolutionError):
            supply.plugin("chat", server, library="no/such/file.js")

        assert len(supply) == 0
        assert emitter.get_history() == []

    def test_remove_plugin(self, supply):
        supply.plugin("chat", server)

        assert supply.remove("chat") is True
        assert supply.plugins() == []
