"""Write side of the review workflow: new comments and file ownership."""

from __future__ import annotations

import logging

from codesquad.ports import CommentStore, OwnershipMapStore
from codesquad.threads.models import Comment, FileThreadMapping, IdFactory, new_id

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, comments: CommentStore, *, id_factory: IdFactory = new_id) -> None:
        self._comments = comments
        self._id_factory = id_factory

    async def add_comment(
        self,
        file: str,
        line: int,
        text: str,
        *,
        end_line: int | None = None,
        code_context: str | None = None,
        thread_id: str | None = None,
    ) -> Comment:
        comment = Comment.create(
            file=file,
            line=line,
            text=text,
            end_line=end_line,
            code_context=code_context,
            thread_id=thread_id,
            id_factory=self._id_factory,
        )
        await self._comments.save(comment)
        return comment

    async def list_comments(self, *, include_submitted: bool = False) -> list[Comment]:
        if include_submitted:
            return await self._comments.find_all()
        return await self._comments.find_active()


class OwnershipTracker:
    """Records the last thread to touch a file (last writer wins)."""

    def __init__(self, mappings: OwnershipMapStore) -> None:
        self._mappings = mappings

    async def track(self, file_path: str, thread_id: str | None) -> FileThreadMapping | None:
        if not thread_id:
            return None
        mapping = FileThreadMapping(file_path=file_path, thread_id=thread_id)
        await self._mappings.save(mapping)
        logger.debug("file %s now owned by thread %s", file_path, thread_id)
        return mapping
