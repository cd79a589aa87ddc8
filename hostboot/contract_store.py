from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import jsonschema

from hostboot.resources import contracts_dir


@dataclass(frozen=True)
class SchemaRef:
    name: str
    path: Path
    schema: Dict[str, Any]


class ContractStore:
    """
    Loads `hostboot/contracts/*.schema.json` and provides validation helpers.

    Notes:
    - Schemas are self-contained (no cross-file $ref).
    - Errors are returned as sorted, path-prefixed strings so output is stable.
    """

    def __init__(self, schemas_dir: Path):
        self._schemas_dir = schemas_dir
        self._schemas: Dict[str, SchemaRef] = {}

    @property
    def schemas_dir(self) -> Path:
        return self._schemas_dir

    def load(self) -> None:
        if not self._schemas_dir.exists():
            raise FileNotFoundError(str(self._schemas_dir))

        for p in sorted(self._schemas_dir.glob("*.schema.json")):
            schema = json.loads(p.read_text(encoding="utf-8"))
            self._schemas[p.name] = SchemaRef(name=p.name, path=p, schema=schema)

    def list_schema_names(self) -> List[str]:
        return sorted(self._schemas.keys())

    def _get(self, schema_name: str) -> SchemaRef:
        ref = self._schemas.get(schema_name)
        if ref is None:
            raise KeyError(schema_name)
        return ref

    def check_schemas(self) -> List[Tuple[str, str]]:
        """
        Returns a list of (schema_name, error_message) for invalid schemas.
        """
        errors: List[Tuple[str, str]] = []
        for name in self.list_schema_names():
            try:
                jsonschema.Draft202012Validator.check_schema(self._get(name).schema)
            except jsonschema.SchemaError as e:
                errors.append((name, e.message))
        return errors

    def validate(self, schema_name: str, instance: Any) -> List[str]:
        """
        Validates an instance and returns a list of error strings (empty means valid).
        """
        validator = jsonschema.Draft202012Validator(self._get(schema_name).schema)
        errors = []
        for e in validator.iter_errors(instance):
            where = "/".join(str(p) for p in e.absolute_path)
            errors.append(f"{where or '<root>'}: {e.message}")
        return sorted(errors)


_DEFAULT_STORE: Optional[ContractStore] = None


def default_contracts() -> ContractStore:
    global _DEFAULT_STORE
    if _DEFAULT_STORE is None:
        store = ContractStore(contracts_dir())
        store.load()
        _DEFAULT_STORE = store
    return _DEFAULT_STORE
