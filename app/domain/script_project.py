from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ScriptFileType(str, Enum):
    SERVER_JS = "SERVER_JS"
    JSON = "JSON"  # appsscript.json (manifest del proyecto)
    HTML = "HTML"


@dataclass(frozen=True)
class ScriptFile:
    name: str
    type: str
    source: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ScriptFile":
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ScriptFileType.SERVER_JS.value),
            source=data.get("source", ""),
        )

    def to_api(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type, "source": self.source}

    @property
    def is_server_code(self) -> bool:
        return self.type == ScriptFileType.SERVER_JS.value

    @property
    def is_manifest(self) -> bool:
        return self.type == ScriptFileType.JSON.value


@dataclass(frozen=True)
class ScriptProject:
    """Snapshot transitorio del contenido de un proyecto; no se cachea entre targets."""
    script_id: str
    files: Tuple[ScriptFile, ...] = ()

    @classmethod
    def from_api(cls, script_id: str, data: Optional[Dict[str, Any]]) -> "ScriptProject":
        data = data or {}
        return cls(
            script_id=data.get("scriptId", script_id),
            files=tuple(ScriptFile.from_api(f) for f in data.get("files", []) or []),
        )

    def file_names(self) -> List[str]:
        return [f.name for f in self.files]

    def find(self, name: str) -> Optional[ScriptFile]:
        for script_file in self.files:
            if script_file.name == name:
                return script_file
        return None
