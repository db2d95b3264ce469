"""Renderer contract and the registry coordinators resolve templates from.

Usage
-----
    from notifier.templates.base import TemplateRegistry
    from notifier.templates.sms import default_sms_templates

    registry = TemplateRegistry(default_sms_templates())
    renderer = registry.get("booking_checkin_reminder")
    body = renderer.render({"first_name": "Ada", ...})
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from string import Template
from typing import Any, Protocol

_WHITESPACE = re.compile(r"\s+")


class Renderer(Protocol):
    def template_name(self) -> str:
        ...

    def render(self, params: Mapping[str, Any]) -> str:
        ...


class StringTemplateRenderer:
    """Renderer backed by :class:`string.Template` with per-field defaults.

    Missing or ``None`` params fall back to *defaults*; placeholders with
    neither are left in place by ``safe_substitute``.
    """

    def __init__(
        self,
        name: str,
        template: str,
        *,
        defaults: Mapping[str, Any] | None = None,
        collapse_whitespace: bool = False,
    ) -> None:
        self._name = name
        self._template = Template(template)
        self._defaults = dict(defaults or {})
        self._collapse_whitespace = collapse_whitespace

    def template_name(self) -> str:
        return self._name

    def render(self, params: Mapping[str, Any]) -> str:
        values = dict(self._defaults)
        values.update({key: value for key, value in (params or {}).items() if value is not None})
        rendered = self._template.safe_substitute({key: str(value) for key, value in values.items()})
        if self._collapse_whitespace:
            return _WHITESPACE.sub(" ", rendered).strip()
        return rendered.strip()


class TemplateRegistry:
    def __init__(self, renderers: Iterable[Renderer] | Mapping[str, Renderer] = ()) -> None:
        self._renderers: dict[str, Renderer] = {}
        if isinstance(renderers, Mapping):
            for name, renderer in renderers.items():
                self.register(renderer, name=name)
        else:
            for renderer in renderers:
                self.register(renderer)

    def register(self, renderer: Renderer, *, name: str | None = None) -> None:
        """Register *renderer* under *name* (defaults to its template name).

        Raises ValueError for an empty name.
        """
        key = name or renderer.template_name()
        if not key or not key.strip():
            raise ValueError("template name must be a non-empty string")
        self._renderers[key] = renderer

    def get(self, name: str) -> Renderer | None:
        return self._renderers.get(name)

    def names(self) -> list[str]:
        return sorted(self._renderers)

    def __contains__(self, name: object) -> bool:
        return name in self._renderers
