"""
Recursive discovery and registration of Handlebars partials.
"""
import asyncio
import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Union

import aiofiles
import aiofiles.os

from ..error.exceptions import ErrorContext, TemplateReadError
from .cache import TemplateCache
from .handlebars import HandlebarsEngine
from .safety import resolve_safe_path

logger = logging.getLogger(__name__)

PARTIAL_EXTENSION = ".hbs"


@dataclass
class PartialSource:
    """A partial file read from disk, not yet registered."""

    name: str
    relative_path: str
    source: str
    mtime: int


class PartialRegistrar:
    """
    Registers every ``.hbs`` file below a directory as a partial.

    Files are read concurrently, one ``asyncio.gather`` per directory level.
    Registration happens after all reads have joined, in lexicographic order
    of the path relative to the partials root, so when two files share a
    name the lexicographically last path wins.
    """

    def __init__(
        self,
        engine: HandlebarsEngine,
        cache: TemplateCache,
        log: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None
    ):
        self.engine = engine
        self.cache = cache
        self.logger = log or logger

    async def register_partials(self, directory: str) -> List[str]:
        """
        Register all partials found below ``directory``.

        Args:
            directory: Partials root

        Returns:
            Names of the registered partials

        Raises:
            TemplateReadError: If the root directory itself cannot be listed
        """
        root = os.path.abspath(directory)
        sources = await self._collect(root, root, top_level=True)

        registered = {}
        for partial in sorted(sources, key=lambda p: p.relative_path):
            try:
                self.engine.register_partial(partial.name, partial.source)
            except Exception as e:
                self.logger.error(f"Error registering partial {partial.name}: {e}")
                continue

            if partial.name in registered:
                self.logger.warning(
                    f"Partial {partial.name} from {registered[partial.name]} "
                    f"overridden by {partial.relative_path}"
                )
            registered[partial.name] = partial.relative_path
            self.cache.set(partial.name, partial.source, partial.mtime)

        self.logger.debug(f"Registered {len(registered)} partial(s) from {root}")
        return list(registered)

    async def _collect(self, root: str, directory: str, top_level: bool = False) -> List[PartialSource]:
        try:
            names = await aiofiles.os.listdir(directory)
        except OSError as e:
            if top_level:
                raise TemplateReadError(
                    f"Failed to read partials directory: {e}",
                    directory,
                    context=ErrorContext(component="partials", operation="register_partials"),
                ) from e
            self.logger.error(f"Error reading partials directory {directory}: {e}")
            return []

        results = await asyncio.gather(*(
            self._collect_entry(root, os.path.join(directory, name)) for name in names
        ))
        return [partial for group in results for partial in group]

    async def _collect_entry(self, root: str, full_path: str) -> List[PartialSource]:
        # Symlinked directories are not followed.
        if not await aiofiles.os.path.islink(full_path) and await aiofiles.os.path.isdir(full_path):
            return await self._collect(root, full_path)

        filename = os.path.basename(full_path)
        if not filename.endswith(PARTIAL_EXTENSION) or filename == PARTIAL_EXTENSION:
            return []

        name = filename[:-len(PARTIAL_EXTENSION)]
        relative_path = os.path.relpath(full_path, root)

        try:
            safe_path = resolve_safe_path(root, relative_path, template_name=name)
            stat_result = await aiofiles.os.stat(safe_path)
            async with aiofiles.open(safe_path, mode='r', encoding='utf-8') as f:
                source = await f.read()
        except Exception as e:
            self.logger.error(f"Error registering partial {name}: {e}")
            return []

        return [PartialSource(name, relative_path, source, stat_result.st_mtime_ns)]
