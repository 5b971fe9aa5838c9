"""
Host - граница интеграции с редактором: отложенный поиск вызовов перевода.

Ядро (extract) остаётся чистой синхронной функцией. Здесь изменения
документа "схлопываются": запуск выполняется после паузы delay секунд
с момента последнего изменения, предыдущий запланированный запуск
для того же документа отменяется.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Tuple, Union

from .extractor import CallSite
from .session import ResolutionSession

logger = logging.getLogger(__name__)

Annotation = Tuple[CallSite, Dict[str, Any]]
ResultCallback = Callable[[str, List[Annotation]], Union[None, Awaitable[None]]]


class ExtractionScheduler:
    """Debounce-планировщик extract + resolve для документов хоста."""

    def __init__(self, session: ResolutionSession, on_result: ResultCallback, delay: float = 0.3):
        self.session = session
        self.on_result = on_result
        self.delay = delay
        self._pending: Dict[str, asyncio.Task] = {}

    def schedule(self, document_id: str, text: str, language: str) -> asyncio.Task:
        """Планирует обработку документа, отменяя предыдущий запуск для него."""
        self.cancel(document_id)
        task = asyncio.get_running_loop().create_task(self._run_later(document_id, text, language))
        self._pending[document_id] = task
        return task

    def cancel(self, document_id: str) -> None:
        task = self._pending.pop(document_id, None)
        if task is not None and not task.done():
            task.cancel()

    def close(self) -> None:
        for document_id in list(self._pending):
            self.cancel(document_id)

    @property
    def pending(self) -> int:
        return sum(1 for task in self._pending.values() if not task.done())

    def annotate(self, text: str, language: str) -> List[Annotation]:
        """Находит вызовы и подставляет переводы (без задержки)."""
        return [(site, self.session.resolve(site.key)) for site in self.session.extract(text, language)]

    async def _run_later(self, document_id: str, text: str, language: str) -> None:
        await asyncio.sleep(self.delay)
        try:
            annotations = self.annotate(text, language)
            outcome = self.on_result(document_id, annotations)
            if inspect.isawaitable(outcome):
                await outcome
            logger.debug(f"{document_id}: найдено вызовов перевода: {len(annotations)}")
        except Exception:
            logger.exception(f"{document_id}: ошибка обработки документа")
        finally:
            if self._pending.get(document_id) is asyncio.current_task():
                del self._pending[document_id]
