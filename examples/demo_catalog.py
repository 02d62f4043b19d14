"""
A small offline process catalog shared by the examples.
"""

from procgraph import ProcessCatalog

NUMBER = {"type": ["number", "null"]}
DATACUBE = {"type": "object", "subtype": "datacube"}


def _math(process_id, *names):
    return {
        "id": process_id,
        "summary": f"{process_id.capitalize()} numbers",
        "parameters": [{"name": name, "schema": NUMBER} for name in names],
        "returns": {"schema": NUMBER},
    }


def _callback(*names):
    return {
        "type": "object",
        "subtype": "process-graph",
        "parameters": [
            {"name": name, "schema": {"type": "array"} if name == "data" else {}}
            for name in names
        ],
    }


PROCESSES = [
    _math("add", "x", "y"),
    _math("subtract", "x", "y"),
    _math("multiply", "x", "y"),
    _math("divide", "x", "y"),
    _math("power", "base", "p"),
    _math("absolute", "x"),
    {
        "id": "array_element",
        "parameters": [
            {"name": "data", "schema": {"type": "array"}},
            {"name": "index", "schema": {"type": "integer"}, "optional": True},
            {"name": "label", "schema": {"type": "string"}, "optional": True},
        ],
    },
    {"id": "min", "parameters": [{"name": "data", "schema": {"type": "array"}}]},
    {"id": "mean", "parameters": [{"name": "data", "schema": {"type": "array"}}]},
    {
        "id": "load_collection",
        "summary": "Load a collection",
        "parameters": [
            {"name": "id", "schema": {"type": "string"}},
            {"name": "spatial_extent", "schema": {"type": "object"}},
            {"name": "temporal_extent", "schema": {"type": "array"}},
            {"name": "bands", "schema": {"type": "array"}, "optional": True},
        ],
        "returns": {"schema": DATACUBE},
    },
    {
        "id": "reduce_dimension",
        "summary": "Reduce dimensions",
        "parameters": [
            {"name": "data", "schema": DATACUBE},
            {
                "name": "reducer",
                "schema": _callback("data", "context"),
            },
            {"name": "dimension", "schema": {"type": "string"}},
        ],
        "returns": {"schema": DATACUBE},
    },
    {
        "id": "apply",
        "summary": "Apply a process to each pixel",
        "parameters": [
            {"name": "data", "schema": DATACUBE},
            {"name": "process", "schema": _callback("x")},
        ],
        "returns": {"schema": DATACUBE},
    },
    {
        "id": "save_result",
        "summary": "Save processed data",
        "parameters": [
            {"name": "data", "schema": DATACUBE},
            {"name": "format", "schema": {"type": "string"}},
        ],
        "returns": {"schema": {"type": "boolean"}},
    },
]


def demo_catalog() -> ProcessCatalog:
    return ProcessCatalog(PROCESSES)
