"""Naming conventions mapping model classes to tables and foreign keys."""

import re

FOREIGN_KEY_SUFFIX = "_id"


def class_name_to_table(class_name: str) -> str:
    """Convert a CapWords class name to a lowercase_with_underscores table name.

    ``CarTyre`` becomes ``car_tyre``; a dotted path such as ``models.CarTyre``
    becomes ``models_car_tyre``.
    """
    name = class_name.replace(".", "_")
    name = re.sub(r"(?<=[a-z])([A-Z])", r"_\1", name)
    name = re.sub(r"_{2,}", "_", name)
    return name.lower()


def build_foreign_key(specified: str | None, table: str) -> str:
    """Return ``specified`` if given, else ``<table>_id``."""
    if specified is not None:
        return specified
    return table + FOREIGN_KEY_SUFFIX
