"""Markdown reference rendering using Jinja2 templates."""

import os
from typing import Any

import jinja2

from .aggregate import DocCollection
from .typespec import render_type
from .validate import describe_result
from .values import render_value

_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
_ENV = jinja2.Environment(
    loader=jinja2.FileSystemLoader(_TEMPLATE_DIR),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)
_ENV.filters["type"] = render_type
_ENV.filters["value"] = render_value
_ENV.filters["result"] = describe_result


def render(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template with the given keyword arguments."""
    template = _ENV.get_template(template_name)
    return template.render(**kwargs)


def render_reference(collection: DocCollection, title: str = "Function reference") -> str:
    return render(
        "reference.md.j2",
        title=title,
        repositories=collection.repositories(),
        categories=collection.by_category(),
    )
