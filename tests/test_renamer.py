"""重命名编排测试: 单链接模式与整篇批量模式"""
from datetime import datetime

from autorename.core.editor import DocumentEditor
from autorename.core.links import find_at_cursor
from autorename.core.plugins import LinkOracle, create_registry
from autorename.core.renamer import ImageRenamer
from autorename.core.resolver import PathResolver
from autorename.core.vault import FileSystemVault

from conftest import PHOTO_TIME, make_file

NEW_PHOTO = "assets/diary-20240305-080709.jpg"


def write_doc(vault_root, text, rel="notes/diary.md"):
    make_file(vault_root, rel, text)
    return rel


class TestBatchRename:
    def test_end_to_end(self, renamer, vault_root):
        doc = write_doc(vault_root, "![[assets/photo.jpg]]")
        result = renamer.rename_all(doc)
        assert result.ok
        assert result.renamed_count == 1
        assert (vault_root / NEW_PHOTO).exists()
        assert not (vault_root / "assets/photo.jpg").exists()
        assert (vault_root / doc).read_text(encoding="utf-8") == f"![[{NEW_PHOTO}]]"

    def test_one_task_per_file(self, renamer, vault_root):
        doc = write_doc(vault_root, "![[assets/photo.jpg]]\n![pic](assets/photo.jpg)\n![[assets/photo.jpg|small]]\n")
        result = renamer.rename_all(doc)
        assert len(result.items) == 1
        assert (vault_root / doc).read_text(encoding="utf-8") == (
            f"![[{NEW_PHOTO}]]\n![pic]({NEW_PHOTO})\n![[{NEW_PHOTO}|small]]\n"
        )

    def test_different_spellings_same_file(self, vault, vault_root, notifier):
        registry = create_registry(discover=False)
        renamer = ImageRenamer(vault, PathResolver(vault, LinkOracle(registry, vault)), notifier)
        doc = write_doc(vault_root, "![[photo.jpg]] and ![x](../assets/photo.jpg)")
        result = renamer.rename_all(doc)
        assert len(result.items) == 1
        assert (vault_root / doc).read_text(encoding="utf-8") == f"![[{NEW_PHOTO}]] and ![x]({NEW_PHOTO})"

    def test_same_text_different_files(self, vault, vault_root, notifier):
        make_file(vault_root, "notes/img.png", mtime=datetime(2024, 1, 1, 10, 0, 0))
        make_file(vault_root, "img.png", mtime=datetime(2024, 1, 1, 11, 0, 0))
        registry = create_registry(discover=False)
        renamer = ImageRenamer(vault, PathResolver(vault, LinkOracle(registry, vault)), notifier)
        doc = write_doc(vault_root, "![[img.png]] ![x](../img.png)")
        result = renamer.rename_all(doc)
        assert result.renamed_count == 2
        assert (vault_root / "notes/diary-20240101-100000.png").exists()
        assert (vault_root / "diary-20240101-110000.png").exists()
        assert (vault_root / doc).read_text(encoding="utf-8") == (
            "![[notes/diary-20240101-100000.png]] ![x](diary-20240101-110000.png)"
        )

    def test_case_mismatched_link(self, vault_root, notifier):
        vault = FileSystemVault(vault_root, case_insensitive=True)
        renamer = ImageRenamer(vault, notifier=notifier)
        doc = write_doc(vault_root, "![[Assets/Photo.JPG]]")
        result = renamer.rename_all(doc)
        assert result.renamed_count == 1
        assert result.items[0].task.target.stored_path == "assets/photo.jpg"
        assert (vault_root / NEW_PHOTO).exists()
        assert (vault_root / doc).read_text(encoding="utf-8") == f"![[{NEW_PHOTO}]]"

    def test_unresolvable_links_skipped(self, renamer, vault_root):
        doc = write_doc(vault_root, "![](https://x.com/a.png) ![[missing.png]] ![[ ]] ![[assets/photo.jpg]]")
        result = renamer.rename_all(doc)
        assert result.renamed_count == 1
        kinds = sorted(kind for _, kind in result.skipped)
        assert kinds == ["ExternalLink", "FileNotFound", "UnresolvableLink"]
        text = (vault_root / doc).read_text(encoding="utf-8")
        assert "![](https://x.com/a.png)" in text
        assert "![[missing.png]]" in text

    def test_no_images_found(self, renamer, vault_root, notifier):
        doc = write_doc(vault_root, "![](https://x.com/a.png)\n")
        result = renamer.rename_all(doc)
        assert result.error_kind == "NoImagesFound"
        assert not result.changed
        assert (vault_root / doc).read_text(encoding="utf-8") == "![](https://x.com/a.png)\n"
        assert (vault_root / "assets/photo.jpg").exists()
        assert notifier.of_level("error")

    def test_no_active_document(self, renamer):
        assert renamer.rename_all(None).error_kind == "NoActiveDocument"
        assert renamer.rename_all("notes/missing.md").error_kind == "NoActiveDocument"

    def test_partial_failure_keeps_failed_link(self, renamer, vault_root, notifier):
        t1, t2 = datetime(2024, 1, 1, 10, 0, 0), datetime(2024, 1, 1, 11, 0, 0)
        make_file(vault_root, "assets/a.png", mtime=t1)
        make_file(vault_root, "assets/b.png", mtime=t2)
        make_file(vault_root, "assets/diary-20240101-100000.png", b"occupied")
        doc = write_doc(vault_root, "![[assets/a.png]] ![[assets/b.png]]")
        result = renamer.rename_all(doc)
        assert result.renamed_count == 1
        assert result.failed_count == 1
        failed = [it for it in result.items if not it.ok][0]
        assert failed.error_kind == "RenameConflict"
        assert (vault_root / "assets/a.png").exists()
        assert (vault_root / doc).read_text(encoding="utf-8") == (
            "![[assets/a.png]] ![[assets/diary-20240101-110000.png]]"
        )
        assert any("a.png" in m for m in notifier.of_level("error"))
        assert notifier.of_level("success")

    def test_same_second_collision(self, renamer, vault_root):
        make_file(vault_root, "assets/a.png", mtime=PHOTO_TIME)
        make_file(vault_root, "assets/b.png", mtime=PHOTO_TIME)
        doc = write_doc(vault_root, "![[assets/a.png]]\n![[assets/b.png]]")
        result = renamer.rename_all(doc)
        assert result.renamed_count == 1
        assert result.failed_count == 1
        text = (vault_root / doc).read_text(encoding="utf-8")
        assert text == "![[assets/diary-20240305-080709.png]]\n![[assets/b.png]]"

    def test_dry_run(self, renamer, vault_root):
        doc = write_doc(vault_root, "![[assets/photo.jpg]]")
        result = renamer.rename_all(doc, dry_run=True)
        assert result.changed
        assert result.content == f"![[{NEW_PHOTO}]]"
        assert (vault_root / "assets/photo.jpg").exists()
        assert (vault_root / doc).read_text(encoding="utf-8") == "![[assets/photo.jpg]]"

    def test_second_run_is_noop(self, renamer, vault_root):
        doc = write_doc(vault_root, "![[assets/photo.jpg]]")
        renamer.rename_all(doc)
        again = renamer.rename_all(doc)
        assert again.ok
        assert again.renamed_count == 0
        assert not again.changed
        assert (vault_root / NEW_PHOTO).exists()


class TestSingleRename:
    def test_rename_at_cursor(self, renamer, vault, vault_root, notifier):
        doc = write_doc(vault_root, "# t\nsee ![[assets/photo.jpg|cover]] here\n")
        editor = DocumentEditor(vault, doc, cursor=(1, 8))
        result = renamer.rename_at_cursor(editor)
        assert result.ok
        assert result.old_path == "assets/photo.jpg"
        assert result.new_path == "assets/diary-20250102-030405.jpg"
        assert (vault_root / result.new_path).exists()
        assert (vault_root / doc).read_text(encoding="utf-8") == (
            "# t\nsee ![[assets/diary-20250102-030405.jpg|cover]] here\n"
        )
        assert notifier.of_level("success")

    def test_inline_only_path_changes(self, renamer, vault, vault_root):
        doc = write_doc(vault_root, "![my photo](assets/photo.jpg)")
        editor = DocumentEditor(vault, doc, cursor=(0, 3))
        assert renamer.rename_at_cursor(editor).ok
        assert (vault_root / doc).read_text(encoding="utf-8") == "![my photo](assets/diary-20250102-030405.jpg)"

    def test_repeat_on_renamed_occurrence(self, renamer, vault, vault_root):
        original = "![[assets/photo.jpg]]"
        doc = write_doc(vault_root, original)
        occ = find_at_cursor(original, 2)
        first = renamer.rename_occurrence(DocumentEditor(vault, doc), 0, occ)
        assert first.ok
        after_first = (vault_root / doc).read_text(encoding="utf-8")
        second = renamer.rename_occurrence(DocumentEditor(vault, doc), 0, occ)
        assert not second.ok
        assert second.error_kind == "FileNotFound"
        assert (vault_root / doc).read_text(encoding="utf-8") == after_first

    def test_no_link_at_cursor(self, renamer, vault, vault_root):
        doc = write_doc(vault_root, "plain text ![[assets/photo.jpg]]")
        result = renamer.rename_at_cursor(DocumentEditor(vault, doc, cursor=(0, 2)))
        assert result.error_kind == "NoLinkAtCursor"
        assert (vault_root / "assets/photo.jpg").exists()

    def test_external_link_not_renamed(self, renamer, vault, vault_root):
        doc = write_doc(vault_root, "![x](https://x.com/p.png)")
        result = renamer.rename_at_cursor(DocumentEditor(vault, doc, cursor=(0, 4)))
        assert result.error_kind == "ExternalLink"
        assert (vault_root / doc).read_text(encoding="utf-8") == "![x](https://x.com/p.png)"

    def test_conflict_leaves_content(self, renamer, vault, vault_root, notifier):
        make_file(vault_root, "assets/diary-20250102-030405.jpg", b"occupied")
        doc = write_doc(vault_root, "![[assets/photo.jpg]]")
        result = renamer.rename_at_cursor(DocumentEditor(vault, doc, cursor=(0, 1)))
        assert result.error_kind == "RenameConflict"
        assert (vault_root / doc).read_text(encoding="utf-8") == "![[assets/photo.jpg]]"
        assert (vault_root / "assets/photo.jpg").exists()
        assert notifier.of_level("error")

    def test_tightest_strategy(self, vault, vault_root, notifier):
        make_file(vault_root, "assets/abc.png", mtime=PHOTO_TIME)
        make_file(vault_root, "assets/b.png", mtime=PHOTO_TIME)
        renamer = ImageRenamer(vault, notifier=notifier, clock=lambda: PHOTO_TIME, cursor_strategy="tightest")
        doc = write_doc(vault_root, "![[assets/abc.png]]![](assets/b.png)")
        result = renamer.rename_at_cursor(DocumentEditor(vault, doc, cursor=(0, 19)))
        assert result.old_path == "assets/b.png"

    def test_save_failure_reported(self, renamer, vault, vault_root, notifier, monkeypatch):
        doc = write_doc(vault_root, "![[assets/photo.jpg]]")
        editor = DocumentEditor(vault, doc, cursor=(0, 1))

        def boom(path, text):
            raise PermissionError("read-only")

        monkeypatch.setattr(vault, "modify", boom)
        result = renamer.rename_at_cursor(editor)
        assert not result.ok
        assert result.error_kind == "PermissionError"
        assert result.new_path == "assets/diary-20250102-030405.jpg"
        assert "assets/diary-20250102-030405.jpg" in result.error
        assert (vault_root / result.new_path).exists()
        assert (vault_root / doc).read_text(encoding="utf-8") == "![[assets/photo.jpg]]"
        assert notifier.of_level("error")
        assert not notifier.of_level("success")
