"""
Loading and structural validation of the V1 (localStorage) export.

Staff and client records are validated with serializers: identity fields are
strict, any violation fails the whole export. The staff role is lenient and
falls back to the default role instead of rejecting the record.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Tuple

from rest_framework import serializers

from core.migration_errors import StructuralValidationError
from core.models import User

ALLOWED_ROLES = tuple(value for value, _ in User.ROLE_CHOICES)

# Export key -> ValidatedExport attribute
OPTIONAL_COLLECTIONS = {
    'carePlans': 'care_plans',
    'weeklyDocs': 'weekly_docs',
    'monthlyReports': 'monthly_reports',
    'vismaWeeks': 'visma_weeks',
}


class LegacyStaffSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    email = serializers.CharField()
    role = serializers.JSONField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        role = attrs.get('role')
        if role not in ALLOWED_ROLES:
            attrs['legacy_role'] = role
            attrs['role'] = User.DEFAULT_ROLE
        return attrs


class LegacyClientSerializer(serializers.Serializer):
    id = serializers.CharField()
    initials = serializers.CharField()
    name = serializers.CharField()
    staffId = serializers.CharField()


@dataclass(frozen=True)
class ValidatedExport:
    staff: Tuple[dict, ...]
    clients: Tuple[dict, ...]
    care_plans: Tuple[dict, ...] = ()
    weekly_docs: Tuple[dict, ...] = ()
    monthly_reports: Tuple[dict, ...] = ()
    visma_weeks: Tuple[dict, ...] = ()
    version: Optional[str] = None
    coerced_roles: Tuple[Tuple[str, Any], ...] = field(default=())


def load_export(path) -> Any:
    """Read the V1 export from disk"""
    path = Path(path)
    if not path.exists():
        raise StructuralValidationError(f'V1 data file not found: {path}', code='MIGRATION_001')
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StructuralValidationError(
            f'Could not parse V1 data file {path}: {e}', code='MIGRATION_002', raw_error=e
        ) from e


def _validate_records(records, serializer_class, label):
    validated = []
    for index, record in enumerate(records):
        serializer = serializer_class(data=record)
        if not serializer.is_valid():
            raise StructuralValidationError(
                f'Invalid {label} record: {json.dumps(record, ensure_ascii=False)}',
                code='MIGRATION_021',
                details={'collection': label, 'index': index, 'errors': serializer.errors},
            )
        validated.append(dict(serializer.validated_data))
    return validated


def _optional_collection(raw, key):
    records = raw.get(key)
    if records is None:
        return ()
    if not isinstance(records, list):
        raise StructuralValidationError(f'{key} data must be an array')
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise StructuralValidationError(
                f'Invalid {key} record at index {index}: expected an object',
                code='MIGRATION_021',
                details={'collection': key, 'index': index},
            )
    return tuple(records)


def validate_export(raw) -> ValidatedExport:
    """
    Validate the raw export as a whole.

    Raises StructuralValidationError on the first violation; nothing is
    partially accepted.
    """
    if not isinstance(raw, dict):
        raise StructuralValidationError('Invalid data structure')
    if not isinstance(raw.get('staff'), list):
        raise StructuralValidationError('Staff data must be an array')
    if not isinstance(raw.get('clients'), list):
        raise StructuralValidationError('Clients data must be an array')

    staff = _validate_records(raw['staff'], LegacyStaffSerializer, 'staff')
    clients = _validate_records(raw['clients'], LegacyClientSerializer, 'client')

    coerced_roles = []
    for record in staff:
        if 'legacy_role' in record:
            coerced_roles.append((record['id'], record.pop('legacy_role')))

    optional = {attr: _optional_collection(raw, key) for key, attr in OPTIONAL_COLLECTIONS.items()}

    version = raw.get('version')
    return ValidatedExport(
        staff=tuple(staff),
        clients=tuple(clients),
        version=str(version) if version is not None else None,
        coerced_roles=tuple(coerced_roles),
        **optional,
    )
