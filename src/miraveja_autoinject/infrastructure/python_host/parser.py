import ast
from typing import Optional

from miraveja_autoinject.domain import SourceParseError, SyntaxTree


def parse_syntax_tree(
    text: str,
    module_name: str,
    path: Optional[str] = None,
    is_package: bool = False,
) -> SyntaxTree:
    """Parse Python source text into a syntax tree.

    Args:
        text: Source text of the module.
        module_name: Dotted name the module is importable under.
        path: File the text was read from, used in error messages.
        is_package: Whether the module is a package ``__init__``.

    Returns:
        The parsed tree.

    Raises:
        SourceParseError: If the text is not valid Python.

    Example:
        >>> tree = parse_syntax_tree("class A: ...", "myapp.models")
        >>> tree.package
        'myapp'
    """
    location = path or module_name
    try:
        module_node = ast.parse(text, filename=location)
    except SyntaxError as e:
        raise SourceParseError(location, e.msg or "invalid syntax", e.lineno) from e
    except ValueError as e:
        # ast.parse rejects sources containing null bytes with ValueError
        raise SourceParseError(location, str(e)) from e

    return SyntaxTree(
        module_name=module_name,
        module_node=module_node,
        text=text,
        path=path,
        is_package=is_package,
    )
