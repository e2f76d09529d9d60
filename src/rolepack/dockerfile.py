# dockerfile.py
from __future__ import annotations

from typing import IO, Optional, Sequence

import jinja2

from .errors import TemplateError
from .model import Package

TEMPLATE_NAME = "Dockerfile-packages"


def docker_quote(value: object) -> str:
    """
    Double-quote a LABEL key or value. Backslashes, quotes and `$` are
    escaped; line breaks would end the instruction, so they become spaces.
    """
    text = " ".join(str(value).splitlines())
    for ch in ("\\", '"', "$"):
        text = text.replace(ch, "\\" + ch)
    return f'"{text}"'


def docker_label(label: str) -> str:
    """Render "key=value" as "key"="value", both quoted."""
    key, _, value = label.partition("=")
    return f"{docker_quote(key)}={docker_quote(value)}"


class DockerfileRenderer:
    """
    Renders the packages-layer Dockerfile.

    The template sees:
      base_image     image to build FROM
      packages       residual packages to ADD (one fingerprint label each)
      version_label  mandatory identity label, "key=value"
      base_label     "key=value" naming the image the layer chain starts FROM

    Labels written here are what LayerMatcher searches for later, so the
    template and the matcher must agree on the `fingerprint.<fp>` shape.
    """

    def __init__(self, template_source: Optional[str] = None):
        """
        Args:
            template_source: raw template text; defaults to the packaged
                Dockerfile-packages asset.
        """
        self.template_source = template_source
        self._env = jinja2.Environment(
            loader=jinja2.PackageLoader("rolepack", "templates"),
            autoescape=False,
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
        )
        self._env.filters["quote"] = docker_quote
        self._env.filters["label"] = docker_label

    def _template(self) -> jinja2.Template:
        try:
            if self.template_source is not None:
                return self._env.from_string(self.template_source)
            return self._env.get_template(TEMPLATE_NAME)
        except jinja2.TemplateError as e:
            raise TemplateError(
                "failed to load Dockerfile template",
                {"template": TEMPLATE_NAME if self.template_source is None else "<inline>", "error": e},
            ) from e

    def render(
        self,
        base_image: str,
        packages: Sequence[Package],
        version_label: str,
        base_label: Optional[str] = None,
    ) -> str:
        template = self._template()
        context = {
            "base_image": base_image,
            "packages": list(packages),
            "version_label": version_label,
            "base_label": base_label,
        }
        try:
            return template.render(context)
        except jinja2.TemplateError as e:
            raise TemplateError("failed to render Dockerfile template", {"error": e}) from e

    def render_to(
        self,
        stream: IO[str],
        base_image: str,
        packages: Sequence[Package],
        version_label: str,
        base_label: Optional[str] = None,
    ) -> None:
        stream.write(self.render(base_image, packages, version_label, base_label))
