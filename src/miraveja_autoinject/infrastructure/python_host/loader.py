"""Infrastructure layer - Loading a source directory into a compilation."""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from miraveja_autoinject.infrastructure.python_host.compilation import Compilation
from miraveja_autoinject.infrastructure.python_host.parser import parse_syntax_tree

logger = logging.getLogger(__name__)


class ProjectLoader:
    """Loads every Python module below a source root into a Compilation.

    Module names are derived from paths relative to the root, so the root
    should be the directory that is put on ``sys.path`` (e.g. ``src``).

    Attributes:
        root: Source root directory.
        exclude: Directory names that are never descended into.

    Example:
        >>> compilation = ProjectLoader(Path("src")).load()
    """

    def __init__(self, root: Union[str, Path], exclude: Optional[Sequence[str]] = None) -> None:
        """Initialize the loader.

        Args:
            root: Source root directory.
            exclude: Directory names to skip, in addition to hidden directories and ``__pycache__``.
        """
        self.root = Path(root)
        self.exclude = set(exclude or ())

    def discover(self) -> List[Path]:
        """Return the Python files below the root, sorted for a stable module order."""
        return sorted(self._walk(self.root))

    def load(self) -> Compilation:
        """Parse every discovered file.

        Returns:
            A compilation holding one tree per file.

        Raises:
            FileNotFoundError: If the root directory does not exist.
            SourceParseError: If a file is not valid Python.
        """
        if not self.root.is_dir():
            raise FileNotFoundError(f"Source directory not found: {self.root}")

        trees = []
        for path in self.discover():
            module_name, is_package = self.module_name_for(path)
            if not module_name:
                continue
            text = path.read_text(encoding="utf-8")
            trees.append(parse_syntax_tree(text, module_name, path=str(path), is_package=is_package))

        logger.info("Loaded %d modules from %s", len(trees), self.root)
        return Compilation(trees)

    def module_name_for(self, path: Path) -> Tuple[str, bool]:
        """Return the dotted module name of a file and whether it is a package.

        Args:
            path: A Python file below the root.
        """
        parts = list(path.relative_to(self.root).with_suffix("").parts)
        is_package = bool(parts) and parts[-1] == "__init__"
        if is_package:
            parts = parts[:-1]
        return ".".join(parts), is_package

    def _walk(self, directory: Path) -> Iterator[Path]:
        for entry in directory.iterdir():
            if entry.is_dir():
                if entry.name.startswith(".") or entry.name == "__pycache__" or entry.name in self.exclude:
                    continue
                yield from self._walk(entry)
            elif entry.suffix == ".py" and entry.stem.isidentifier():
                yield entry
