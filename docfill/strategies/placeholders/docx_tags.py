"""Free-form ``{{name}}`` tags on top of docxtpl.

docxtpl treats the inside of ``{{ ... }}`` as a Jinja expression, so
``{{client name}}`` is a syntax error and ``{{order-id}}`` is a subtraction.
Placeholder names are arbitrary trimmed text, so every tag is rewritten into
a lookup in one context dictionary before Jinja sees it::

    {{ client name }}  ->  {{ _placeholders["client name"] }}

Tags with an empty name are kept as literal text.
"""

import html
import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from docxtpl import DocxTemplate

logger = logging.getLogger(__name__)

PLACEHOLDER_LOOKUP = "_placeholders"

# Tags already wrapped in a raw block are literal text from an earlier pass.
_TAG = re.compile(r"(?<!\{% raw %\})\{\{(.*?)\}\}", re.DOTALL)
_LOOKUP_TAG = re.compile(rf'^\s*{PLACEHOLDER_LOOKUP}\[".*"\]\s*$', re.DOTALL)


def lookup_expression(name: str) -> str:
    """Jinja expression reading ``name`` from the placeholder dictionary."""
    return f"{{{{ {PLACEHOLDER_LOOKUP}[{json.dumps(name)}] }}}}"


def lookup_context(values: Mapping[str, Any]) -> dict[str, Any]:
    """Wrap a name to value mapping into a docxtpl render context."""
    return {PLACEHOLDER_LOOKUP: dict(values)}


class PlaceholderDocxTemplate(DocxTemplate):
    """DocxTemplate whose ``{{...}}`` tags are plain placeholder names.

    Attributes:
        tag_names: Names of the tags rewritten so far, collected while
            docxtpl patches each XML part.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.tag_names: set[str] = set()

    def patch_xml(self, src_xml: str) -> str:
        # docxtpl has already merged tags split across runs at this point
        return _TAG.sub(self._rewrite_tag, super().patch_xml(src_xml))

    def _rewrite_tag(self, match: re.Match[str]) -> str:
        inner = match.group(1)
        if _LOOKUP_TAG.match(inner):
            return match.group(0)

        name = html.unescape(inner).strip()
        if not name:
            return f"{{% raw %}}{match.group(0)}{{% endraw %}}"

        self.tag_names.add(name)
        return lookup_expression(name)

    def placeholder_names(self) -> set[str]:
        """Names of every tag in the body, headers and footers.

        Raises:
            jinja2.TemplateError: If the rewritten template is still not
                valid Jinja (for example an unclosed ``{{``).
        """
        declared = self.get_undeclared_template_variables()
        names = self.tag_names | {name for name in declared if name != PLACEHOLDER_LOOKUP}
        logger.debug(f"Template declares {len(names)} placeholder tags")
        return names
