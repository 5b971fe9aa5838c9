"""Тесты ExtractionScheduler: отложенный запуск extract + resolve."""

import asyncio
import logging

import pytest

from locale_lens.host import ExtractionScheduler
from locale_lens.session import ResolutionSession


class TestExtractionScheduler:
    """Debounce изменений документа."""

    @pytest.mark.asyncio
    async def test_superseded_run_cancelled(self, config) -> None:
        session = ResolutionSession(config)
        await session.init()
        calls = []
        scheduler = ExtractionScheduler(
            session, lambda doc, annotations: calls.append((doc, annotations)), delay=0.05,
        )

        first = scheduler.schedule("app.js", "t('home.title')", "javascript")
        second = scheduler.schedule("app.js", "t('nav.back')", "javascript")
        await second

        assert first.cancelled()
        assert len(calls) == 1
        document_id, annotations = calls[0]
        assert document_id == "app.js"
        assert [(site.key, translations) for site, translations in annotations] == [
            ("nav.back", {"en": "Back"}),
        ]
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_documents_independent(self, config) -> None:
        session = ResolutionSession(config)
        await session.init()
        seen = []

        async def on_result(document_id, annotations):
            seen.append(document_id)

        scheduler = ExtractionScheduler(session, on_result, delay=0.01)
        tasks = [
            scheduler.schedule("a.js", "t('home.title')", "javascript"),
            scheduler.schedule("b.vue", "<template>{{ $t('home.title') }}</template>", "vue"),
        ]
        await asyncio.gather(*tasks)

        assert sorted(seen) == ["a.js", "b.vue"]

    @pytest.mark.asyncio
    async def test_close_cancels_pending(self, config) -> None:
        session = ResolutionSession(config)
        await session.init()
        calls = []
        scheduler = ExtractionScheduler(session, lambda *args: calls.append(args), delay=0.05)

        task = scheduler.schedule("app.js", "t('home.title')", "javascript")
        scheduler.close()
        await asyncio.sleep(0.1)

        assert task.cancelled()
        assert calls == []
        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_annotate(self, config) -> None:
        session = ResolutionSession(config)
        await session.init()
        scheduler = ExtractionScheduler(session, lambda *args: None)

        annotations = scheduler.annotate("this.$t('home.title')", "javascript")

        assert len(annotations) == 1
        site, translations = annotations[0]
        assert site.key == "home.title"
        assert translations == {"en": "Home", "zh-cn": "首页"}

    @pytest.mark.asyncio
    async def test_callback_error_logged(self, config, caplog) -> None:
        session = ResolutionSession(config)
        await session.init()

        def on_result(document_id, annotations):
            raise RuntimeError("renderer failed")

        scheduler = ExtractionScheduler(session, on_result, delay=0.01)
        task = scheduler.schedule("app.js", "t('home.title')", "javascript")

        with caplog.at_level(logging.ERROR, logger="locale_lens.host"):
            await task

        assert task.exception() is None
        assert "renderer failed" in caplog.text
        assert scheduler.pending == 0

    def test_exported_from_package(self) -> None:
        import locale_lens

        assert locale_lens.ExtractionScheduler is ExtractionScheduler
        assert "ExtractionScheduler" in locale_lens.__all__
