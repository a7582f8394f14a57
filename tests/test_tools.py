import pytest

from sitewright.models.chat import EditOperation
from sitewright.models.file_tree import FileSystemTree, list_paths, read_file, write_file
from sitewright.services.stream import FinishFrame, StartFrame, StreamWriter, TextFrame
from sitewright.services.tools import ProjectTools


def op(type_, filepath, old, new=None):
    return EditOperation(type=type_, filepath=filepath, oldCode=old, newCode=new)


@pytest.fixture
def writer():
    return StreamWriter()


class TestFileTools:
    def test_list_files_empty(self, writer):
        assert ProjectTools(FileSystemTree(), writer).list_files() == []

    def test_read_files_partial_success(self, project_tree, writer):
        out = ProjectTools(project_tree, writer).read_files(["src/index.css", "src/missing.ts", "src"])
        assert out["src/index.css"] == "body { margin: 0; }\n"
        assert out["src/missing.ts"].startswith("Error: File not found")
        assert out["src"].startswith("Error: Not a file")

    def test_scenario_a_modification(self, writer):
        tree = FileSystemTree()
        write_file(tree, "a.txt", "hello world")
        result = ProjectTools(tree, writer).update_files([op("modification", "a.txt", "world", "there")])
        assert result.results == {"a.txt": "hello there"}
        assert result.errors == {}
        assert read_file(tree, "a.txt") == "hello there"

    def test_scenario_b_missing_file(self, writer):
        tree = FileSystemTree()
        result = ProjectTools(tree, writer).update_files([op("addition", "missing.txt", "x", "y")])
        assert result.results == {}
        assert "not found" in result.errors["missing.txt"].lower()
        assert list_paths(tree) == []

    def test_one_bad_file_does_not_block_another(self, project_tree, writer):
        tools = ProjectTools(project_tree, writer)
        result = tools.update_files([
            op("modification", "nope.tsx", "a", "b"),
            op("modification", "src/index.css", "margin: 0", "margin: 8px"),
        ])
        assert result.results["src/index.css"] == "body { margin: 8px; }\n"
        assert "nope.tsx" in result.errors
        assert read_file(project_tree, "src/index.css") == "body { margin: 8px; }\n"

    def test_edits_to_one_file_apply_in_order(self, project_tree, writer):
        tools = ProjectTools(project_tree, writer)
        result = tools.update_files([
            op("modification", "src/App.tsx", "Hello", "Hi"),
            op("addition", "src/App.tsx", "<h1>Hi</h1>;", "// greeting"),
        ])
        assert "<h1>Hi</h1>;\n// greeting" in result.results["src/App.tsx"]
        assert [c.type for c in tools.changes] == ["modification", "addition"]

    def test_failed_anchor_leaves_file_untouched(self, project_tree, writer):
        before = read_file(project_tree, "src/App.tsx")
        tools = ProjectTools(project_tree, writer)
        result = tools.update_files([
            op("modification", "src/App.tsx", "Hello", "Hi"),
            op("removal", "src/App.tsx", "not in the file"),
        ])
        assert "edit 2 of 2 failed" in result.errors["src/App.tsx"]
        assert read_file(project_tree, "src/App.tsx") == before
        assert tools.changes == []

    def test_leading_slash_names_the_same_file(self, project_tree, writer):
        tools = ProjectTools(project_tree, writer)
        assert tools.read_files(["/src/App.tsx"])["/src/App.tsx"].startswith("export default")
        result = tools.update_files([
            op("modification", "/src/App.tsx", "Hello", "Hi"),
            op("modification", "src/App.tsx", "Hi", "Hey"),
        ])
        assert result.errors == {}
        assert list(result.results) == ["src/App.tsx"]
        assert "<h1>Hey</h1>" in read_file(project_tree, "src/App.tsx")

    def test_unsafe_path_reported_per_file(self, project_tree, writer):
        result = ProjectTools(project_tree, writer).update_files([op("removal", "../etc/passwd", "root")])
        assert "../etc/passwd" in result.errors


class TestResponseTools:
    def test_emit_chunks_text(self, writer):
        tools = ProjectTools(FileSystemTree(), writer, chunk_size=20)
        text = "I'll add a dark mode toggle to the header."
        tools.emit_preliminary_text(text)
        frames = writer.frames
        assert isinstance(frames[0], StartFrame)
        chunks = [f.text for f in frames if isinstance(f, TextFrame)]
        assert "".join(chunks) == text
        assert all(len(c) <= 20 for c in chunks)
        assert isinstance(frames[-1], FinishFrame)
        assert frames[-1].is_continued

    def test_concluding_text_finishes_with_stop(self, writer):
        tools = ProjectTools(FileSystemTree(), writer)
        tools.emit_concluding_text("Done.")
        assert writer.frames[-1].finish_reason == "stop"
        assert not writer.frames[-1].is_continued
        assert tools.emitted == ["Done."]

    def test_held_concluding_turn_has_no_finish(self, writer):
        tools = ProjectTools(FileSystemTree(), writer)
        tools.emit_concluding_text("Done.", hold_finish=True)
        assert not any(isinstance(f, FinishFrame) for f in writer.frames)
        assert tools.emitted == ["Done."]

    def test_emit_does_not_touch_tree(self, project_tree, writer):
        before = list_paths(project_tree)
        ProjectTools(project_tree, writer).emit_preliminary_text("hello")
        assert list_paths(project_tree) == before


class TestDispatch:
    def test_list_files(self, project_tree, writer):
        out = ProjectTools(project_tree, writer).dispatch("listFiles", {})
        assert out["status"] == "ok"
        assert "src/App.tsx" in out["data"]

    def test_update_files_camel_case_arguments(self, project_tree, writer):
        out = ProjectTools(project_tree, writer).dispatch("updateFiles", {"updates": [
            {"type": "modification", "filepath": "src/App.tsx", "oldCode": "Hello", "newCode": "Howdy"},
        ]})
        assert out["status"] == "ok"
        assert "Howdy" in out["data"]["results"]["src/App.tsx"]

    def test_missing_new_code_is_rejected_before_execution(self, project_tree, writer):
        before = read_file(project_tree, "src/App.tsx")
        out = ProjectTools(project_tree, writer).dispatch("updateFiles", {"updates": [
            {"type": "modification", "filepath": "src/App.tsx", "oldCode": "Hello"},
        ]})
        assert out["status"] == "error"
        assert out["error"].startswith("ValidationError")
        assert read_file(project_tree, "src/App.tsx") == before

    def test_empty_old_code_is_rejected(self, project_tree, writer):
        out = ProjectTools(project_tree, writer).dispatch("updateFiles", {"updates": [
            {"type": "removal", "filepath": "src/App.tsx", "oldCode": ""},
        ]})
        assert out["status"] == "error"

    def test_read_files_requires_paths(self, project_tree, writer):
        out = ProjectTools(project_tree, writer).dispatch("readFiles", {"paths": "src/App.tsx"})
        assert out["status"] == "error"

    def test_unknown_tool(self, project_tree, writer):
        out = ProjectTools(project_tree, writer).dispatch("deleteEverything", {})
        assert out == {"status": "error", "tool": "deleteEverything", "error": "ValidationError: unknown tool"}

    def test_preliminary_response_tool_streams(self, writer):
        tools = ProjectTools(FileSystemTree(), writer)
        out = tools.dispatch("preliminaryResponse", {"text": "- update header"})
        assert out["data"]["delivered"] is True
        assert tools.emitted == ["- update header"]
