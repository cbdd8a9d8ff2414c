import uuid
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Optional

STAFF = 'staff'
CLIENT = 'client'


def legacy_key(value) -> Optional[str]:
    """
    Legacy reference in the form the record validators store ids: trimmed text.

    Numbers become their text form; anything else (null, booleans, objects)
    cannot reference a migrated record.
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    key = str(value).strip()
    return key or None


class IdentityMapBuilder:
    """Mutable old -> new identifier table, owned by the migrator of a root entity"""

    def __init__(self, kind: str):
        self.kind = kind
        self._mapping: Dict[str, str] = {}

    def new_id(self) -> str:
        return str(uuid.uuid4())

    def record(self, old_id: str, new_id: str) -> None:
        self._mapping[legacy_key(old_id)] = new_id

    def assign(self, old_id: str) -> str:
        """Generate a fresh identifier for ``old_id`` and record it"""
        new_id = self.new_id()
        self.record(old_id, new_id)
        return new_id

    def __len__(self):
        return len(self._mapping)

    def freeze(self) -> 'IdentityMap':
        return IdentityMap(self.kind, self._mapping)


class IdentityMap(Mapping):
    """Read-only old -> new identifier lookup handed to downstream migrators"""

    def __init__(self, kind: str, mapping=None):
        self.kind = kind
        self._mapping = MappingProxyType(dict(mapping or {}))

    def __getitem__(self, old_id):
        return self._mapping[old_id]

    def __iter__(self):
        return iter(self._mapping)

    def __len__(self):
        return len(self._mapping)

    def resolve(self, old_id) -> Optional[str]:
        """New identifier for ``old_id``, or None when the record was not migrated"""
        return self._mapping.get(legacy_key(old_id))

    def __repr__(self):
        return f'IdentityMap({self.kind!r}, size={len(self)})'


class RemapTables:
    """Both root-entity lookups for one migration run"""

    def __init__(self, staff: IdentityMap, clients: Optional[IdentityMap] = None):
        self.staff = staff
        self.clients = clients if clients is not None else IdentityMap(CLIENT)

    def resolve(self, kind: str, old_id) -> Optional[str]:
        if kind == STAFF:
            return self.staff.resolve(old_id)
        if kind == CLIENT:
            return self.clients.resolve(old_id)
        raise ValueError(f'Unknown identity kind: {kind}')
