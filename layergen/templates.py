# File: layergen/templates.py
"""
LayerGen - Template Store & Renderer
=====================================
Flat text templates with literal ``{Token}`` placeholders.  There are no
loops and no conditionals: rendering is a single pass of literal
replacement.

Templates are loaded once, at construction, from a directory into a
``{name: text}`` mapping.  The default directory is the set bundled with
the package (``layergen/code_templates``).

A template that cannot be found renders as empty text: a warning is
logged and the caller carries on with the rest of the batch.  A template
directory that does not exist raises ``ConfigurationError``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from layergen.models import ConfigurationError
from layergen.utils import read_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BUNDLED_TEMPLATE_DIR: Path = Path(__file__).resolve().parent / "code_templates"

TEMPLATE_SUFFIX: str = ".txt"

_PLACEHOLDER_RE: re.Pattern[str] = re.compile(r"\{(\w+)\}")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render(template: str, tokens: Mapping[str, str]) -> str:
    """
    Replace every ``{Token}`` placeholder whose name is in *tokens*.

    Placeholders without a value are left exactly as written.  Replacement
    happens in one pass, so a value that itself contains ``{Other}`` is
    never substituted again and the order of *tokens* does not matter.

    Examples:
        >>> render("class {ModelTypeName} : {Base}", {"ModelTypeName": "User"})
        'class User : {Base}'
    """
    if not template or not tokens:
        return template

    def _substitute(match: re.Match) -> str:
        value: Optional[str] = tokens.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return _PLACEHOLDER_RE.sub(_substitute, template)


# ---------------------------------------------------------------------------
# TemplateStore
# ---------------------------------------------------------------------------


class TemplateStore:
    """
    Named templates loaded into memory.

    Usage::

        store = TemplateStore()                      # bundled templates
        store = TemplateStore(Path("./my_templates"))
        text = store.render("IRepositoryTemplate.txt", {"ModelTypeName": "User"})
    """

    def __init__(self, template_dir: Optional[Path] = None) -> None:
        self.template_dir: Path = (
            Path(template_dir) if template_dir is not None else BUNDLED_TEMPLATE_DIR
        )
        self._templates: Dict[str, str] = {}
        self._load_directory()

    def _load_directory(self) -> None:
        if not self.template_dir.is_dir():
            raise ConfigurationError(
                f"Template directory not found: {self.template_dir}"
            )

        for path in sorted(self.template_dir.glob(f"*{TEMPLATE_SUFFIX}")):
            self._templates[path.name] = read_file(path)

        logger.debug(
            "Loaded %d templates from %s.", len(self._templates), self.template_dir
        )

    # -- Query --------------------------------------------------------------

    @property
    def names(self) -> List[str]:
        return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def read(self, name: str) -> str:
        """Return the template text, or ``""`` when it does not exist."""
        content: Optional[str] = self._templates.get(name)
        if content is None:
            logger.warning("Template not found: %s; rendering empty content.", name)
            return ""
        return content

    # -- Mutation -----------------------------------------------------------

    def add(self, name: str, content: str) -> None:
        """Register (or replace) an in-memory template."""
        self._templates[name] = content

    # -- Rendering ----------------------------------------------------------

    def render(self, name: str, tokens: Mapping[str, str]) -> str:
        return render(self.read(name), tokens)

    def __repr__(self) -> str:
        return f"<TemplateStore {len(self._templates)} templates from {self.template_dir}>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "BUNDLED_TEMPLATE_DIR",
    "TemplateStore",
    "render",
]

logger.debug("layergen.templates loaded.")
