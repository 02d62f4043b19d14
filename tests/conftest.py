"""
Shared fixtures: a small process catalog resembling a real back-end.
"""

import pytest

from procgraph import ProcessBuilder, ProcessCatalog, set_strict_state


def _binary(process_id, left="x", right="y"):
    return {
        "id": process_id,
        "summary": f"{process_id} two numbers",
        "parameters": [
            {"name": left, "schema": {"type": ["number", "null"]}},
            {"name": right, "schema": {"type": ["number", "null"]}},
        ],
        "returns": {"schema": {"type": ["number", "null"]}},
    }


def _reducer(process_id):
    return {
        "id": process_id,
        "parameters": [
            {"name": "data", "schema": {"type": "array"}},
            {"name": "ignore_nodata", "schema": {"type": "boolean"}, "optional": True, "default": True},
        ],
        "returns": {"schema": {"type": ["number", "null"]}},
    }


PROCESSES = [
    _binary("add"),
    _binary("subtract"),
    _binary("multiply"),
    _binary("divide"),
    _binary("power", "base", "p"),
    {
        "id": "array_element",
        "parameters": [
            {"name": "data", "schema": {"type": "array"}},
            {"name": "index", "schema": {"type": "integer"}, "optional": True},
            {"name": "label", "schema": {"type": ["number", "string"]}, "optional": True},
        ],
        "returns": {"schema": {}},
    },
    {
        "id": "array_create",
        "parameters": [{"name": "data", "schema": {"type": "array"}, "optional": True}],
        "returns": {"schema": {"type": "array"}},
    },
    {
        "id": "constant",
        "parameters": [{"name": "x", "schema": {}}],
        "returns": {"schema": {}},
    },
    {
        "id": "load_collection",
        "summary": "Load a collection",
        "parameters": [
            {"name": "id", "schema": {"type": "string"}},
            {"name": "spatial_extent", "schema": [{"type": "object"}, {"type": "null"}]},
            {"name": "temporal_extent", "schema": [{"type": "array"}, {"type": "null"}]},
            {"name": "bands", "schema": [{"type": "array"}, {"type": "null"}], "optional": True},
        ],
        "returns": {"schema": {"type": "object", "subtype": "datacube"}},
    },
    {
        "id": "reduce_dimension",
        "parameters": [
            {"name": "data", "schema": {"type": "object", "subtype": "datacube"}},
            {
                "name": "reducer",
                "schema": {
                    "type": "object",
                    "subtype": "process-graph",
                    "parameters": [
                        {"name": "data", "schema": {"type": "array"}},
                        {"name": "context", "schema": {}, "optional": True},
                    ],
                },
            },
            {"name": "dimension", "schema": {"type": "string"}},
        ],
        "returns": {"schema": {"type": "object", "subtype": "datacube"}},
    },
    {
        "id": "apply",
        "parameters": [
            {"name": "data", "schema": {"type": "object", "subtype": "datacube"}},
            {
                "name": "process",
                "schema": {
                    "type": "object",
                    "subtype": "process-graph",
                    "parameters": [{"name": "x", "schema": {"type": ["number", "null"]}}],
                },
            },
        ],
        "returns": {"schema": {"type": "object", "subtype": "datacube"}},
    },
    _reducer("min"),
    _reducer("sum"),
    {
        "id": "save_result",
        "parameters": [
            {"name": "data", "schema": {"type": "object", "subtype": "datacube"}},
            {"name": "format", "schema": {"type": "string"}},
        ],
        "returns": {"schema": {"type": "boolean"}},
    },
]


@pytest.fixture
def processes():
    return [dict(process) for process in PROCESSES]


@pytest.fixture
def catalog(processes):
    return ProcessCatalog(processes)


@pytest.fixture
def builder(catalog):
    return ProcessBuilder(catalog)


@pytest.fixture(autouse=True)
def reset_strict_state():
    set_strict_state(False)
    yield
    set_strict_state(False)
