"""Application layer - Syntactic discovery of candidate declarations."""

import ast
import logging
from typing import List, Optional

from miraveja_autoinject.application.context import CancellationToken
from miraveja_autoinject.domain import CandidateDeclaration, ICompilation

logger = logging.getLogger(__name__)


class DeclarationScanner:
    """Collects every decorated class statement of a compilation.

    This is a cheap, over-inclusive filter: a class qualifies as soon as it
    carries any decorator. What the decorators mean is left to the resolver.
    """

    def scan(
        self,
        compilation: ICompilation,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> List[CandidateDeclaration]:
        """Walk every syntax tree once and collect decorated classes.

        Args:
            compilation: The program snapshot to scan.
            cancellation_token: Checked once per syntax tree.

        Returns:
            Candidates in tree order, then walk order within each tree.

        Raises:
            GenerationCancelledError: If cancellation is requested.
        """
        token = cancellation_token or CancellationToken()
        candidates: List[CandidateDeclaration] = []

        for tree in compilation.syntax_trees:
            token.throw_if_cancellation_requested()
            for node in ast.walk(tree.module_node):
                if isinstance(node, ast.ClassDef) and node.decorator_list:
                    candidates.append(CandidateDeclaration(syntax_tree=tree, node=node))

        logger.debug("Found %d decorated classes", len(candidates))
        return candidates
