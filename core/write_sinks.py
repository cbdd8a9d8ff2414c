"""
Destinations for migrated rows.

Migrators always hand their rows to a sink; the sink decides whether the row
reaches the database. Dry runs and live runs share every other step.

``write`` returns the problems the live database would raise for the row.
The database sink raises them instead, so it always returns an empty list.
"""
from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS
from django.db.models import UniqueConstraint


class DatabaseSink:
    """Insert-or-replace keyed by the freshly generated identifier"""

    dry_run = False

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def write(self, model, row_id, values):
        model.objects.using(self.using).update_or_create(id=row_id, defaults=values)
        return []


def unique_keys(model):
    """Column tuples that must be unique across the table, by attname"""
    keys = [
        (field.attname,)
        for field in model._meta.concrete_fields
        if field.unique and not field.primary_key
    ]
    for constraint in model._meta.constraints:
        if isinstance(constraint, UniqueConstraint) and constraint.fields:
            keys.append(tuple(model._meta.get_field(name).attname for name in constraint.fields))
    return keys


class DryRunSink:
    """
    Records what would have been written and touches nothing.

    Each row is checked the way the live database would check it: field
    values (choices, dates, required columns) and uniqueness among the rows
    of this run. Rows already in the database are not consulted.
    """

    dry_run = True

    def __init__(self):
        self.writes = []
        self.rejections = []
        self._seen = {}

    def check(self, model, row_id, values):
        problems = []
        relations = [field.name for field in model._meta.concrete_fields if field.is_relation]
        try:
            model(id=row_id, **values).clean_fields(exclude=relations)
        except ValidationError as e:
            for field_name, messages in e.message_dict.items():
                problems.extend(f'{field_name}: {message}' for message in messages)

        for key in unique_keys(model):
            key_values = tuple(values.get(column) for column in key)
            if not all(isinstance(value, (str, int, float)) for value in key_values):
                # NULLs never collide in a unique index
                continue
            seen = self._seen.setdefault((model._meta.db_table, key), set())
            if key_values in seen:
                pairs = ', '.join(f'{column}={value!r}' for column, value in zip(key, key_values))
                problems.append(f'duplicate {pairs}')
            seen.add(key_values)
        return problems

    def write(self, model, row_id, values):
        problems = self.check(model, row_id, values)
        self.writes.append((model._meta.db_table, row_id, dict(values)))
        if problems:
            self.rejections.append((model._meta.db_table, row_id, problems))
        return problems

    def count(self, model):
        table = model._meta.db_table
        return sum(1 for written_table, _, _ in self.writes if written_table == table)
