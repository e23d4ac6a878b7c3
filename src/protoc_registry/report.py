"""Plain-text summary of a registry's contents."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader

from protoc_registry.registry import DescriptorRegistry


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
    )


def _message_data(registry: DescriptorRegistry) -> List[Dict]:
    messages = []
    for message in registry.messages():
        fields = []
        for fd in message.fields():
            fields.append({
                "number": fd.number,
                "name": fd.name,
                "label": fd.field_label.name.lower(),
                "type": fd.field_type(registry).describe(),
                "default": None if fd.default_value is None else str(fd.default_value),
            })
        messages.append({"name": message.name, "fields": fields})
    return messages


def _enum_data(registry: DescriptorRegistry) -> List[Dict]:
    return [
        {
            "name": enum.name,
            "enum_values": [{"name": v.name, "number": v.number} for v in enum.values()],
        }
        for enum in registry.enums()
    ]


def render_summary(registry: DescriptorRegistry) -> str:
    """Render every message and enum of ``registry`` in declaration order."""
    env = _get_template_env()
    template = env.get_template("registry_summary.txt.j2")
    return template.render(
        messages=_message_data(registry),
        enums=_enum_data(registry),
    )
