"""
Tests for the process catalog.
"""

import logging

import pytest

from procgraph import (
    CatalogLookupError,
    InvalidCatalogError,
    ProcessBuilder,
    ProcessCatalog,
)
from procgraph.core.catalog import PROCESS_REGISTRY_URL


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload
        self.raised = False

    def raise_for_status(self):
        self.raised = True

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, payload):
        self.payload = payload
        self.requests = []

    def get(self, url, timeout=None):
        self.requests.append((url, timeout))
        return FakeResponse(self.payload)


class TestCatalogConstruction:
    """Accepted and rejected process listings."""

    def test_list_of_processes(self, processes):
        """A plain list of descriptors is accepted."""
        catalog = ProcessCatalog(processes)
        assert len(catalog) == len(processes)
        assert "add" in catalog
        assert catalog.supports("reduce_dimension")
        assert not catalog.supports("nope")

    def test_processes_response(self, processes):
        """A GET /processes response is accepted."""
        catalog = ProcessCatalog({"processes": processes, "links": []})
        assert catalog.ids()[0] == "add"

    def test_copy_of_catalog(self, catalog):
        """A catalog can be built from another catalog."""
        assert ProcessCatalog(catalog).ids() == catalog.ids()

    @pytest.mark.parametrize("value", [None, "add", 42, {"links": []}, {"processes": "add"}])
    def test_invalid_listing(self, value):
        """Anything else is an invalid catalog."""
        with pytest.raises(InvalidCatalogError):
            ProcessCatalog(value)

    def test_invalid_descriptor(self):
        """Descriptors need an id and a parameter list."""
        with pytest.raises(InvalidCatalogError):
            ProcessCatalog([{"parameters": []}])
        with pytest.raises(InvalidCatalogError):
            ProcessCatalog([{"id": "x", "parameters": {"a": 1}}])
        with pytest.raises(InvalidCatalogError):
            ProcessCatalog([{"id": "x", "parameters": [{"schema": {}}]}])

    def test_builder_rejects_invalid_catalog(self):
        """An invalid catalog prevents creating a builder."""
        with pytest.raises(InvalidCatalogError):
            ProcessBuilder("not a catalog")

    def test_invalid_catalog_is_value_error(self):
        """Invalid catalogs can be caught as ValueError."""
        with pytest.raises(ValueError):
            ProcessCatalog(None)

    def test_duplicate_keeps_first(self, caplog):
        """Duplicate ids keep the first descriptor and log a warning."""
        with caplog.at_level(logging.WARNING, logger="procgraph.core.catalog"):
            catalog = ProcessCatalog(
                [{"id": "a", "summary": "first"}, {"id": "a", "summary": "second"}]
            )
        assert len(catalog) == 1
        assert catalog.get("a").summary == "first"
        assert "more than once" in caplog.text


class TestProcessDescription:
    """Parsed process descriptors."""

    def test_parameters_in_order(self, catalog):
        """Parameters keep their declared order."""
        spec = catalog.get("load_collection")
        assert spec.parameter_names == ["id", "spatial_extent", "temporal_extent", "bands"]
        assert spec.summary == "Load a collection"
        assert spec.parameter("bands").optional
        assert spec.parameter("id").required
        assert spec.parameter("missing") is None

    def test_accepts_type(self, catalog):
        """Schema lists and type lists are both understood."""
        spec = catalog.get("load_collection")
        assert spec.parameter("temporal_extent").accepts_type("array")
        assert spec.parameter("temporal_extent").accepts_type("null")
        assert not spec.parameter("id").accepts_type("array")
        assert catalog.get("add").parameter("x").accepts_type("number")


class TestCallbackSignature:
    """Lookup of the parameters handed to callbacks."""

    def test_callback_parameters(self, catalog):
        """Names come from the process-graph schema."""
        assert catalog.callback_parameters("reduce_dimension", "reducer") == ["data", "context"]
        assert catalog.callback_parameters("apply", "process") == ["x"]

    def test_not_a_callback(self, catalog):
        """Plain parameters receive nothing."""
        assert catalog.callback_parameters("reduce_dimension", "dimension") == []

    def test_missing_process_or_parameter(self, catalog):
        """Missing entries raise a lookup error."""
        with pytest.raises(CatalogLookupError):
            catalog.callback_parameters("nope", "reducer")
        with pytest.raises(CatalogLookupError):
            catalog.callback_parameters("reduce_dimension", "nope")

    def test_callback_parameter_schemas(self, catalog):
        """Schemas are keyed by callback parameter name."""
        schemas = catalog.callback_parameter_schemas("reduce_dimension", "reducer")
        assert schemas["data"] == {"type": "array"}
        assert catalog.callback_parameter_schemas("nope", "reducer") == {}


class TestRemoteCatalog:
    """Fetching catalogs over HTTP."""

    def test_from_url(self, processes):
        """The response body is turned into a catalog."""
        session = FakeSession({"processes": processes})
        catalog = ProcessCatalog.from_url("https://example.org/processes", session=session)
        assert len(catalog) == len(processes)
        assert session.requests == [("https://example.org/processes", 30)]

    def test_from_version(self, processes):
        """Versions map to the public registry."""
        session = FakeSession(processes)
        ProcessCatalog.from_version("1.2.0", session=session)
        ProcessCatalog.from_version(session=session)
        assert session.requests[0][0] == f"{PROCESS_REGISTRY_URL}/1.2.0/processes.json"
        assert session.requests[1][0] == f"{PROCESS_REGISTRY_URL}/processes.json"

    def test_builder_from_url(self, processes):
        """Builders can be created straight from a URL."""
        session = FakeSession({"processes": processes})
        builder = ProcessBuilder.from_url("https://example.org/processes", session=session)
        assert builder.supports("add")
