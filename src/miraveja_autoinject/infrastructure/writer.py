"""Infrastructure layer - Writing generated modules to disk."""

import logging
from pathlib import Path
from typing import Iterable, List, Union

from miraveja_autoinject.domain import GENERATED_HEADER, GeneratedSource

logger = logging.getLogger(__name__)


class SourceWriter:
    """Writes generated modules below an output directory.

    Each module lands at its dotted path. Missing package directories are
    created with an empty ``__init__.py``, and files whose content is already
    up to date are left untouched. Modules a pass stops producing can be
    removed again.

    Attributes:
        output_dir: Directory module paths are relative to.
    """

    def __init__(self, output_dir: Union[str, Path]) -> None:
        self.output_dir = Path(output_dir)

    def path_for(self, source: GeneratedSource) -> Path:
        return self.output_dir / source.hint_name

    def path_for_module(self, module_name: str) -> Path:
        return self.output_dir / (module_name.replace(".", "/") + ".py")

    def stale(self, sources: Iterable[GeneratedSource], obsolete: Iterable[str] = ()) -> List[Path]:
        """Return the files that writing or removing would change.

        Args:
            sources: Modules the pass generated.
            obsolete: Modules the pass no longer generates.
        """
        stale_paths = []
        for source in sources:
            path = self.path_for(source)
            if not path.is_file() or path.read_text(encoding="utf-8") != source.text:
                stale_paths.append(path)
        stale_paths.extend(path for path in map(self.path_for_module, obsolete) if _is_generated(path))
        return stale_paths

    def write(self, sources: Iterable[GeneratedSource]) -> List[Path]:
        """Write the generated modules.

        Args:
            sources: Modules to write.

        Returns:
            Paths of the files that were created or changed.
        """
        written = []
        for source in sources:
            path = self.path_for(source)
            self._ensure_package(path.parent)
            if path.is_file() and path.read_text(encoding="utf-8") == source.text:
                logger.debug("%s is up to date", path)
                continue
            path.write_text(source.text, encoding="utf-8")
            logger.info("Wrote %s", path)
            written.append(path)
        return written

    def remove(self, module_names: Iterable[str]) -> List[Path]:
        """Delete previously generated modules that the pass no longer produces.

        Files that do not start with the generated header belong to the user
        and are kept.

        Returns:
            Paths of the files that were deleted.
        """
        removed = []
        for path in map(self.path_for_module, module_names):
            if _is_generated(path):
                path.unlink()
                logger.info("Removed %s", path)
                removed.append(path)
        return removed

    def _ensure_package(self, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        # Every directory between the output root and the module becomes a package
        current = directory
        while current != self.output_dir and self.output_dir in current.parents:
            init_file = current / "__init__.py"
            if not init_file.exists():
                init_file.touch()
            current = current.parent


def _is_generated(path: Path) -> bool:
    if not path.is_file():
        return False
    with path.open(encoding="utf-8") as file:
        return file.readline().rstrip("\n") == GENERATED_HEADER
