"""
Integration Tests - End-to-end sync workflows.

Tests:
- Full pipeline (scan → extract → fingerprint → index → persist)
- Incremental passes within and across processes
- Duplicate titles and unreadable documents
- Lost index with a surviving cache
- Command line entry point
"""

import pytest

from recipecard.config import RecipeConfig
from recipecard.errors import CorpusUnavailable
from recipecard.fingerprint import load_fingerprints
from recipecard.orchestrator import Orchestrator, main, run_sync

from docx_helpers import recipe_paragraphs


@pytest.fixture
def corpus(recipes_dir, make_docx):
    """Two recipes in separate folders, each with a scan."""
    pie = make_docx(
        recipes_dir / "Desserts" / "pie.docx",
        recipe_paragraphs("Apple Pie", ["2 cups flour", "6 apples"], ["Bake for an hour"]),
    )
    (pie.parent / "pie_scan.jpg").write_bytes(b"scan")
    soup = make_docx(
        recipes_dir / "Soups" / "soup.docx",
        recipe_paragraphs("Pea Soup", ["500g split peas"], ["Simmer"]),
    )
    return {"pie": pie, "soup": soup}


class TestSyncPipeline:
    """End-to-end tests for Orchestrator.run_sync."""

    @pytest.fixture
    def orchestrator(self, test_config):
        o = Orchestrator(test_config)
        yield o
        o.close()

    @pytest.mark.asyncio
    async def test_first_sync(self, orchestrator, corpus, test_config):
        """Every recipe is indexed and the cache is written."""
        stats = await orchestrator.run_sync()

        assert stats.recipes_indexed == 2
        assert stats.cache_saved
        assert set(load_fingerprints(test_config.cache_path)) == {"Apple Pie", "Pea Soup"}

        pie = orchestrator.recipes["Apple Pie"]
        assert pie.docx_path == corpus["pie"]
        assert pie.scan_paths == [corpus["pie"].parent / "pie_scan.jpg"]

    @pytest.mark.asyncio
    async def test_search_returns_recipes(self, orchestrator, corpus):
        """Search hits map back to the recipes of the last pass."""
        await orchestrator.run_sync()

        hits = orchestrator.search("apples")

        assert [r.title for r in hits] == ["Apple Pie"]

    @pytest.mark.asyncio
    async def test_second_pass_touches_nothing(self, orchestrator, corpus):
        """An unchanged corpus causes no index mutations."""
        await orchestrator.run_sync()

        stats = await orchestrator.run_sync()

        assert stats.mutations == 0
        assert stats.recipes_unchanged == 2

    @pytest.mark.asyncio
    async def test_edit_reindexes_one(self, orchestrator, corpus, make_docx):
        """Changing one line updates only that recipe."""
        await orchestrator.run_sync()
        make_docx(corpus["soup"], recipe_paragraphs("Pea Soup", ["400g split peas"], ["Simmer"]))

        stats = await orchestrator.run_sync()

        assert stats.recipes_updated == 1
        assert stats.recipes_unchanged == 1
        assert [r.title for r in orchestrator.search("400g")] == ["Pea Soup"]

    @pytest.mark.asyncio
    async def test_removed_document(self, orchestrator, corpus, test_config):
        """A deleted document leaves the index and the cache."""
        await orchestrator.run_sync()
        corpus["soup"].unlink()

        stats = await orchestrator.run_sync()

        assert stats.recipes_removed == 1
        assert orchestrator.search("peas") == []
        assert "Pea Soup" not in load_fingerprints(test_config.cache_path)

    @pytest.mark.asyncio
    async def test_dotted_folder_keeps_recipe(self, orchestrator, corpus, recipes_dir):
        """Moving a recipe into a dot-named folder does not drop it."""
        await orchestrator.run_sync()
        corpus["soup"].parent.rename(recipes_dir / ".Soups")

        stats = await orchestrator.run_sync()

        assert stats.recipes_removed == 0
        assert stats.recipes_unchanged == 2
        assert orchestrator.recipes["Pea Soup"].docx_path == recipes_dir / ".Soups" / "soup.docx"

    @pytest.mark.asyncio
    async def test_duplicate_titles(self, orchestrator, recipes_dir, make_docx):
        """The first document in walk order wins a title."""
        first = make_docx(recipes_dir / "a" / "pie.docx", recipe_paragraphs("Pie", ["apples"]))
        make_docx(recipes_dir / "b" / "pie.docx", recipe_paragraphs("Pie", ["cherries"]))

        stats = await orchestrator.run_sync()

        assert stats.recipes_indexed == 1
        assert stats.recipes_skipped == 1
        assert orchestrator.recipes["Pie"].docx_path == first

    @pytest.mark.asyncio
    async def test_unreadable_document(self, orchestrator, corpus, recipes_dir, make_docx):
        """A broken document is counted and the rest still sync."""
        make_docx(recipes_dir / "broken.docx", with_body=False)

        stats = await orchestrator.run_sync()

        assert stats.documents_failed == 1
        assert stats.recipes_indexed == 2

    @pytest.mark.asyncio
    async def test_missing_corpus(self, orchestrator, temp_dir):
        """A missing recipe directory aborts the pass."""
        with pytest.raises(CorpusUnavailable):
            await orchestrator.run_sync(temp_dir / "nowhere")


class TestPersistenceAcrossRuns:
    """Tests that span more than one Orchestrator."""

    @pytest.mark.asyncio
    async def test_restart_is_incremental(self, corpus, test_config):
        """A new process reuses the cache and the database."""
        await run_sync(config=test_config)

        stats = await run_sync(config=test_config)

        assert stats.mutations == 0

    @pytest.mark.asyncio
    async def test_lost_index_is_rebuilt(self, corpus, test_config):
        """With the database gone, the surviving cache is ignored."""
        await run_sync(config=test_config)
        for suffix in ("", "-wal", "-shm"):
            test_config.db_path.with_name(test_config.db_path.name + suffix).unlink(missing_ok=True)

        orchestrator = Orchestrator(test_config)
        try:
            stats = await orchestrator.run_sync()
            assert stats.recipes_indexed == 2
            assert [r.title for r in orchestrator.search("apples")] == ["Apple Pie"]
        finally:
            orchestrator.close()

    @pytest.mark.asyncio
    async def test_memory_only_index(self, corpus, recipes_dir):
        """Without an index path nothing is persisted but passes stay incremental."""
        config = RecipeConfig(recipes_path=recipes_dir, index_path=None)
        orchestrator = Orchestrator(config)
        try:
            first = await orchestrator.run_sync()
            second = await orchestrator.run_sync()
        finally:
            orchestrator.close()

        assert first.recipes_indexed == 2
        assert not first.cache_saved
        assert second.mutations == 0


class TestCommandLine:
    """Tests for the recipecard console script."""

    @pytest.fixture(autouse=True)
    def isolated_env(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        for name in ("RECIPECARD_RECIPES", "RECIPECARD_INDEX", "RECIPECARD_CONCURRENCY"):
            monkeypatch.delenv(name, raising=False)

    def test_sync(self, corpus, recipes_dir, temp_dir, capsys):
        """sync prints the pass summary."""
        code = main(["-r", str(recipes_dir), "-i", str(temp_dir / "idx"), "sync"])

        assert code == 0
        assert "Synced 2 recipes (2 new" in capsys.readouterr().out
        assert (temp_dir / "idx" / "item.idx").exists()

    def test_search(self, corpus, recipes_dir, capsys):
        """search prints one line per hit."""
        code = main(["-r", str(recipes_dir), "--memory", "search", "split", "peas"])

        assert code == 0
        assert capsys.readouterr().out.strip() == f"Pea Soup: {corpus['soup']}"

    def test_missing_corpus_exits_nonzero(self, temp_dir):
        """An unreadable recipe directory is a failed run."""
        assert main(["-r", str(temp_dir / "nowhere"), "--memory", "sync"]) == 1

    def test_memory_run_creates_no_index_directory(self, corpus, recipes_dir, temp_dir):
        """--memory leaves nothing behind in the working directory."""
        assert main(["-r", str(recipes_dir), "--memory", "sync"]) == 0

        assert not (temp_dir / "search_idx").exists()
