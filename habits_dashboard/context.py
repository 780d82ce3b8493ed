from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class DashboardContext:
    current_user_email: str
    display_name: str
    theme_name: str
    constants: Dict[str, Any] = field(default_factory=dict)

    def get(self, key, default=None):
        return getattr(self, key, self.constants.get(key, default))

    def __getitem__(self, key):
        if hasattr(self, key):
            return getattr(self, key)
        return self.constants[key]
