"""Tree rewrite passes applied by the transformer."""

from .admonitions import AdmonitionRewriter
from .base import Rewriter, apply_rewriters
from .comments import CommentRewriter
from .expressions import ExpressionRewriter
from .fences import FenceRewriter
from .html import HtmlRewriter
from .links import LinkResolver, LinkTextCleanup
from .validate import StructureValidator

__all__ = [
    "AdmonitionRewriter",
    "CommentRewriter",
    "ExpressionRewriter",
    "FenceRewriter",
    "HtmlRewriter",
    "LinkResolver",
    "LinkTextCleanup",
    "Rewriter",
    "StructureValidator",
    "apply_rewriters",
]
