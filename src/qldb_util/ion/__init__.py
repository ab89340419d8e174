"""Ion value conversion: JSON-like values in, JSON-like values out.

Public surface
--------------
- :func:`encode_value`         : drive an Ion writer from a Python value.
- :func:`to_ion_parameter`     : encode into a fresh :class:`IonValueWriter`.
- :class:`IonValueWriter`      : writer handle used for statement parameters.
- :func:`decode_result`        : decode a driver result set (read once).
- :func:`decode_text`          : decode pretty-printed Ion text.
- :func:`pretty_print`         : render records as indented Ion text.
- :func:`distinct_field_names` : field names across decoded records.

Usage example
-------------
::

    from qldb_util.ion import decode_text, to_ion_parameter

    writer = to_ion_parameter({"id": 1, "identity": 2})
    decode_text(writer.get_text())   # {"id": 1, "identity": 2}
"""

from qldb_util.ion.decoder import (
    decode_result,
    decode_text,
    decode_values,
    distinct_field_names,
    ion_to_python,
    pretty_print,
)
from qldb_util.ion.encoder import encode_value, to_ion_parameter
from qldb_util.ion.writer import IonValueWriter, IonWriter

__all__ = [
    "IonValueWriter",
    "IonWriter",
    "decode_result",
    "decode_text",
    "decode_values",
    "distinct_field_names",
    "encode_value",
    "ion_to_python",
    "pretty_print",
    "to_ion_parameter",
]
