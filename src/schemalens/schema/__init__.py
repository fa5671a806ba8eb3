"""Schema pipeline -- canonicalize, materialize, emit, flatten, and tree-ify.

Every function here is a pure, synchronous walk over JSON values.  Cycle
guards are call-local, so independent calls (even over the same schema) are
safe to run concurrently.

Typical usage::

    from schemalens.parser import SchemaResolver
    from schemalens.schema import flatten, materialize, to_tree, to_yaml

    resolver = SchemaResolver.from_document(raw)
    schema = {"$ref": "#/components/schemas/Pet"}
    print(to_yaml(materialize(schema, resolver)))
    rows = flatten(schema, resolver)
    tree = to_tree(schema, "Pet", resolver)

Sub-modules:

* :mod:`~schemalens.schema.kinds` -- one-shot structural classification.
* :mod:`~schemalens.schema.normalizer` -- ref following, ``allOf`` merge,
  ``oneOf``/``anyOf`` collapse.
* :mod:`~schemalens.schema.materializer` -- deterministic example values.
* :mod:`~schemalens.schema.emitter` -- YAML and JSON text.
* :mod:`~schemalens.schema.flattener` -- :class:`~schemalens.models.SchemaRow` lists.
* :mod:`~schemalens.schema.tree` -- :class:`~schemalens.models.TreeNode` hierarchies.
"""

from schemalens.schema.emitter import to_json, to_yaml
from schemalens.schema.flattener import flatten
from schemalens.schema.kinds import SchemaKind, classify
from schemalens.schema.materializer import materialize
from schemalens.schema.normalizer import normalize
from schemalens.schema.tree import to_tree

__all__ = [
    "SchemaKind",
    "classify",
    "flatten",
    "materialize",
    "normalize",
    "to_json",
    "to_tree",
    "to_yaml",
]
