"""
Mailforge Kernel - Session Layer

Sits between the pure functions (reducer, parser, generator) and the
outside world (storage, timers). Coordinates one editing session.

  dispatch   reduce an action; debounce property edits into one history entry
  flush      commit pending property edits now
  load/save  persistence through a TemplateStorage, with debounced autosave
  import_mjml / export_mjml

Timers run on the caller's asyncio loop. Without a running loop, property
edits stay pending until flush() or the next non-property action, and
autosave is left to explicit save() calls.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from mailforge.config import Settings
from mailforge.config import settings as default_settings
from mailforge.kernel import actions as A
from mailforge.kernel.errors import StorageError
from mailforge.kernel.generator import generate_mjml
from mailforge.kernel.parser import parse_mjml
from mailforge.kernel.reducer import DEBOUNCE_ELIGIBLE, create_initial_state, reduce
from mailforge.kernel.registry import BlockRegistry, get_default_registry
from mailforge.kernel.storage import TemplateStorage
from mailforge.kernel.types import Action, EditorState, Selection, Template

logger = logging.getLogger(__name__)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class EditorSession:
    """
    One editor, one history timeline, one writer.

    Every dispatch is synchronous; only the debounce timers and storage
    calls are asynchronous.
    """

    def __init__(
        self,
        storage: TemplateStorage | None = None,
        key: str | None = None,
        *,
        settings: Settings | None = None,
        registry: BlockRegistry | None = None,
        template: Template | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self.settings = settings or default_settings
        self.registry = registry or get_default_registry()
        self.state: EditorState = create_initial_state(
            template, max_history=self.settings.MAX_HISTORY, registry=self.registry
        )

        self._history_timer: asyncio.TimerHandle | None = None
        self._save_timer: asyncio.TimerHandle | None = None
        self._save_task: asyncio.Task | None = None

    # -- Snapshots ----------------------------------------------------------

    @property
    def template(self) -> Template:
        return self.state.template

    @property
    def selection(self) -> Selection:
        return self.state.selection

    @property
    def can_undo(self) -> bool:
        return self.state.can_undo

    @property
    def can_redo(self) -> bool:
        return self.state.can_redo

    @property
    def has_pending_edits(self) -> bool:
        """Property edits applied to the template but not yet in history."""
        return self.state.template is not self.state.history[self.state.history_index]

    # -- Dispatch -----------------------------------------------------------

    def dispatch(self, action: Action) -> EditorState:
        if action.type in DEBOUNCE_ELIGIBLE:
            new_state = reduce(self.state, action)
            if new_state is not self.state:
                self._arm_history_timer()
        else:
            if action.type == A.PUSH_HISTORY:
                self._cancel_history_timer()
            else:
                self.flush()
            new_state = reduce(self.state, action)

        self._set_state(new_state)
        return self.state

    def flush(self) -> None:
        """Commit pending property edits as a single history entry."""
        self._cancel_history_timer()
        if self.has_pending_edits:
            self._set_state(reduce(self.state, A.push_history()))

    def undo(self) -> EditorState:
        return self.dispatch(A.undo())

    def redo(self) -> EditorState:
        return self.dispatch(A.redo())

    def _set_state(self, new_state: EditorState) -> None:
        changed = new_state.template is not self.state.template
        self.state = new_state
        if changed:
            self._schedule_save()

    def _arm_history_timer(self) -> None:
        loop = _running_loop()
        if loop is None:
            return
        self._cancel_history_timer()
        self._history_timer = loop.call_later(self.settings.history_debounce_seconds, self._on_history_timer)

    def _cancel_history_timer(self) -> None:
        if self._history_timer is not None:
            self._history_timer.cancel()
            self._history_timer = None

    def _on_history_timer(self) -> None:
        self._history_timer = None
        self.flush()

    # -- Persistence --------------------------------------------------------

    @property
    def _persistent(self) -> bool:
        return self.storage is not None and self.key is not None

    def _schedule_save(self) -> None:
        if not self._persistent:
            return
        loop = _running_loop()
        if loop is None:
            return
        self._cancel_save_timer()
        self._save_timer = loop.call_later(self.settings.autosave_debounce_seconds, self._start_autosave)

    def _cancel_save_timer(self) -> None:
        if self._save_timer is not None:
            self._save_timer.cancel()
            self._save_timer = None

    def _start_autosave(self) -> None:
        self._save_timer = None
        self._save_task = asyncio.ensure_future(self._autosave())

    async def _autosave(self) -> None:
        try:
            await self.save()
        except StorageError as e:
            logger.warning("Autosave of %r failed: %s", self.key, e)

    async def save(self) -> None:
        """Write the current template (pending edits included) to storage now."""
        if not self._persistent:
            return
        await self.storage.save(self.key, self.state.template)

    async def load(self) -> bool:
        """
        Replace the template with the stored one, sanitized against this
        session's registry. Returns False when nothing is stored.
        """
        if not self._persistent:
            return False
        stored = await self.storage.load(self.key)
        if stored is None:
            return False
        self.dispatch(A.set_template(stored))
        return True

    async def clear_persisted(self) -> None:
        self._cancel_save_timer()
        if self._persistent:
            await self.storage.remove(self.key)

    async def close(self) -> None:
        """Commit pending edits and write out any save still waiting on its timer."""
        self.flush()
        pending_save = self._save_timer is not None
        self._cancel_save_timer()
        if self._save_task is not None and not self._save_task.done():
            await self._save_task
        if pending_save:
            await self.save()

    # -- Markup -------------------------------------------------------------

    def import_mjml(self, text: str) -> Template:
        """Parse MJML and make it the current template. Raises ParseError."""
        template = parse_mjml(text, self.registry)
        self.dispatch(A.set_template(template))
        return self.state.template

    def export_mjml(self, *, now: datetime | None = None) -> str:
        return generate_mjml(self.state.template, self.registry, now=now)
