"""Platform configuration form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping

from agilow.models.platforms import Platform
from agilow.navigation import configuration_fields
from gui.views.base import BaseView


@dataclass
class SettingsView(BaseView):
    name: str = "settings"

    def render(self, platform: Platform, values: Mapping[str, str]) -> List[str]:
        lines = [f"Configure {platform.display_name}"]
        for spec in configuration_fields(platform):
            value = values.get(spec.name, "")
            if value and spec.secret:
                value = "•" * 8
            lines.append(f"  {spec.label}: {value or spec.placeholder}")
        if len(lines) == 1:
            lines.append(f"  {platform.display_name} is not available yet")
        return lines
